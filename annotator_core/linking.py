# annotator_core/linking.py
"""
Link mode: the two-click protocol that turns keypoint picks into
undirected connections.

    IDLE --pick(a)--> SOURCE_PICKED(a) --pick(b)--> IDLE   (edge a-b added
                                                            unless present)
                      SOURCE_PICKED(a) --pick(a)--> IDLE   (cancel)

Picks outside link mode only move the focus. Leaving link mode, or deleting
the pending source, drops back to IDLE.
"""

from enum import Enum

from .models import Connection


class LinkState(Enum):
    IDLE = "idle"
    SOURCE_PICKED = "source_picked"


class PickResult(Enum):
    FOCUSED = "focused"
    SOURCE_SET = "source_set"
    CANCELLED = "cancelled"
    CONNECTED = "connected"
    DUPLICATE = "duplicate"


def has_connection(connections, a, b):
    return any(c.joins(a, b) for c in connections)


def add_connection(connections, a, b):
    """Append the edge a-b unless it is a self link or already present. Returns the new edge or None."""
    if a == b or has_connection(connections, a, b):
        return None
    connection = Connection(a, b)
    connections.append(connection)
    return connection


def remove_connection(connections, a, b):
    """Remove the edge a-b in either direction. Returns True if something was removed."""
    before = len(connections)
    connections[:] = [c for c in connections if not c.joins(a, b)]
    return len(connections) != before


def prune_connections(connections, keypoint_id):
    """Drop every edge touching `keypoint_id`; returns how many were removed."""
    before = len(connections)
    connections[:] = [c for c in connections if not c.touches(keypoint_id)]
    return before - len(connections)


def live_connections(connections, keypoint_ids):
    """Edges whose both endpoints still exist. Dangling ones are left out."""
    ids = set(keypoint_ids)
    return [c for c in connections if c.source in ids and c.target in ids]


class LinkBuilder:
    def __init__(self):
        self.link_mode = False
        self.state = LinkState.IDLE
        self.source = None
        self.focused = None

    def reset(self):
        self.state = LinkState.IDLE
        self.source = None

    def set_link_mode(self, enabled):
        self.link_mode = bool(enabled)
        self.reset()

    def toggle_link_mode(self):
        self.set_link_mode(not self.link_mode)
        return self.link_mode

    def would_connect(self, keypoint_id, connections):
        """True if pick(keypoint_id) would add a new edge."""
        return (self.link_mode
                and self.state is LinkState.SOURCE_PICKED
                and self.source != keypoint_id
                and not has_connection(connections, self.source, keypoint_id))

    def pick(self, keypoint_id, connections):
        """
        Feed one keypoint pick. New edges are appended to `connections`.
        Returns a PickResult describing the transition taken.
        """
        if not self.link_mode:
            self.focused = keypoint_id
            return PickResult.FOCUSED

        if self.state is LinkState.IDLE:
            self.state = LinkState.SOURCE_PICKED
            self.source = keypoint_id
            self.focused = keypoint_id
            return PickResult.SOURCE_SET

        source = self.source
        self.reset()
        self.focused = None
        if source == keypoint_id:
            return PickResult.CANCELLED
        if add_connection(connections, source, keypoint_id) is None:
            return PickResult.DUPLICATE
        return PickResult.CONNECTED

    def forget(self, keypoint_id):
        """Called when a keypoint is deleted."""
        if self.source == keypoint_id:
            self.reset()
        if self.focused == keypoint_id:
            self.focused = None
