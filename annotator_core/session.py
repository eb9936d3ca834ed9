# annotator_core/session.py
"""
Keypoint editing session.

A KeypointSession holds everything the keypoint and skeleton editors show
for one image: keypoints, the connections between them, undo/redo history
and the link-mode state. The UI layer calls these methods in response to
clicks and drags and redraws from the session afterwards.
"""

from .config import get_config
from .exceptions import EntityNotFoundError, NoImageError
from .export_tools import build_skeleton_meta, encode_keypoints_line, write_skeleton_meta, write_yolo_keypoints
from .geometry import clamp
from .history import HistoryManager
from .image import load_image
from .import_tools import connections_from_meta, decode_yolo_text
from .linking import (LinkBuilder, PickResult, add_connection, live_connections,
                      prune_connections, remove_connection)
from .logger import get_logger
from .models import Keypoint, VISIBILITY_VISIBLE, check_visibility, keypoint_label
from .templates import instantiate_template, template_keypoints_from

logger = get_logger(__name__)


class KeypointSession:
    def __init__(self, width=None, height=None, file_name=""):
        self.image = None
        self.file_name = file_name
        self.width = width
        self.height = height
        self.keypoints = []
        self.connections = []
        self.history = HistoryManager()
        self.linker = LinkBuilder()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def has_image(self):
        return self.width is not None and self.height is not None

    def _require_image(self):
        if not self.has_image:
            raise NoImageError("Load an image before editing keypoints")

    def load_image(self, info):
        """Start over on a new image (an ImageInfo from annotator_core.image)."""
        self.image = info
        self.file_name = info.file_name
        self.width, self.height = info.width, info.height
        self.keypoints = []
        self.connections = []
        self.history.clear()
        self.linker = LinkBuilder()
        logger.info(f"Keypoint session reset for {info.file_name} ({self.width}x{self.height})")

    def open_image(self, path):
        """Load an image file with Pillow and start over on it."""
        info = load_image(path, get_config().max_width)
        self.load_image(info)
        return info

    def state(self):
        return {"keypoints": self.keypoints, "connections": self.connections}

    def _restore(self, state):
        self.keypoints = state["keypoints"]
        self.connections = state["connections"]
        ids = {kp.id for kp in self.keypoints}
        if self.linker.source is not None and self.linker.source not in ids:
            self.linker.reset()
        if self.linker.focused not in ids:
            self.linker.focused = None

    def _record(self):
        self.history.snapshot(self.state())

    def get_keypoint(self, keypoint_id):
        for kp in self.keypoints:
            if kp.id == keypoint_id:
                return kp
        raise EntityNotFoundError("Unknown keypoint", entity_id=keypoint_id)

    def visible_connections(self):
        return live_connections(self.connections, (kp.id for kp in self.keypoints))

    def linked_names(self, keypoint_id):
        by_id = {kp.id: kp for kp in self.keypoints}
        return [
            by_id[c.other(keypoint_id)].name
            for c in self.visible_connections()
            if c.touches(keypoint_id)
        ]

    # ------------------------------------------------------------------
    # Keypoints
    # ------------------------------------------------------------------

    def click_canvas(self, x, y):
        """A click on empty canvas: new keypoint, unless link mode is on."""
        if self.linker.link_mode:
            return None
        return self.add_keypoint(x, y)

    def add_keypoint(self, x, y, name=None, visibility=VISIBILITY_VISIBLE):
        self._require_image()
        check_visibility(visibility)
        self._record()
        kp = Keypoint(
            clamp(x, 0, self.width),
            clamp(y, 0, self.height),
            name if name is not None else keypoint_label(len(self.keypoints)),
            visibility,
        )
        self.keypoints.append(kp)
        return kp

    def move_keypoint(self, keypoint_id, x, y, record=True):
        """
        Move a keypoint, clamped to the canvas. A drag calls this for every
        pointer move; pass record=False after the first call so the whole
        drag undoes in one step.
        """
        kp = self.get_keypoint(keypoint_id)
        if record:
            self._record()
        kp.x = clamp(x, 0, self.width)
        kp.y = clamp(y, 0, self.height)
        return kp

    def rename_keypoint(self, keypoint_id, name):
        kp = self.get_keypoint(keypoint_id)
        self._record()
        kp.name = name
        return kp

    def set_visibility(self, keypoint_id, visibility):
        kp = self.get_keypoint(keypoint_id)
        check_visibility(visibility)
        self._record()
        kp.visibility = visibility
        return kp

    def delete_keypoint(self, keypoint_id):
        self.get_keypoint(keypoint_id)
        self._record()
        self.keypoints = [kp for kp in self.keypoints if kp.id != keypoint_id]
        prune_connections(self.connections, keypoint_id)
        self.linker.forget(keypoint_id)

    def clear(self):
        if not self.keypoints and not self.connections:
            return
        self._record()
        self.keypoints = []
        self.connections = []
        self.linker.reset()
        self.linker.focused = None

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def toggle_link_mode(self):
        return self.linker.toggle_link_mode()

    def set_link_mode(self, enabled):
        self.linker.set_link_mode(enabled)

    def pick_keypoint(self, keypoint_id):
        """A click on a keypoint; see annotator_core.linking for the protocol."""
        self.get_keypoint(keypoint_id)
        if self.linker.would_connect(keypoint_id, self.connections):
            self._record()
        return self.linker.pick(keypoint_id, self.connections)

    def connect(self, a, b):
        self.get_keypoint(a)
        self.get_keypoint(b)
        if a == b or any(c.joins(a, b) for c in self.connections):
            return None
        self._record()
        return add_connection(self.connections, a, b)

    def disconnect(self, a, b):
        if not any(c.joins(a, b) for c in self.connections):
            return False
        self._record()
        return remove_connection(self.connections, a, b)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def apply_template(self, template):
        """Append a fresh copy of the template scaled to this canvas."""
        self._require_image()
        keypoints, connections = instantiate_template(template, self.width, self.height)
        self._record()
        self.keypoints.extend(keypoints)
        self.connections.extend(connections)
        logger.info(f"Applied skeleton {template.name!r}: {len(keypoints)} keypoints")
        return keypoints, connections

    def save_as_template(self, library, name, template_id=None):
        """Store the current keypoints and connections as a template in `library`."""
        self._require_image()
        return library.save(
            name,
            template_keypoints_from(self.keypoints, self.width, self.height),
            self.visible_connections(),
            template_id,
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self):
        state = self.history.undo(self.state())
        if state is None:
            return False
        self._restore(state)
        return True

    def redo(self):
        state = self.history.redo(self.state())
        if state is None:
            return False
        self._restore(state)
        return True

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def to_yolo_line(self, class_index=0):
        self._require_image()
        return encode_keypoints_line(self.keypoints, self.width, self.height, class_index)

    def to_meta(self):
        return build_skeleton_meta(self.keypoints, self.connections)

    def export_yolo(self, out_dir, with_meta=True):
        """Write <name>.txt (and <name>_meta.json); returns the written paths."""
        self._require_image()
        paths = []
        path = write_yolo_keypoints(self.keypoints, self.width, self.height, self.file_name, out_dir)
        if path is None:
            return paths
        paths.append(path)
        if with_meta:
            paths.append(write_skeleton_meta(self.keypoints, self.connections, self.file_name, out_dir))
        return paths

    def load_yolo(self, text, meta=None):
        """
        Replace the keypoints with the first object of a YOLO pose file.
        Keypoint names and connections come from `meta` when given.
        Returns False, changing nothing, if the text holds no valid record.
        """
        self._require_image()
        objects = decode_yolo_text(text, self.width, self.height)
        if not objects:
            logger.info("YOLO import found no valid records")
            return False
        if len(objects) > 1:
            logger.warning(f"YOLO import holds {len(objects)} objects, only the first is loaded")
        names = meta.get("names") if isinstance(meta, dict) else None
        keypoints = objects[0].to_keypoints(names)
        self._record()
        self.keypoints = keypoints
        self.connections = connections_from_meta(meta, keypoints) if meta else []
        self.linker.reset()
        self.linker.focused = None
        return True
