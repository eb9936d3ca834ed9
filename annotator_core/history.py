# annotator_core/history.py
import copy


class HistoryManager:
    """
    Snapshot based undo/redo.

    Callers snapshot the current state before every mutation. undo() and
    redo() take the live state, file a copy of it on the opposite stack and
    hand back the state to restore; both return None when there is nothing
    to do.
    """

    def __init__(self, limit=None):
        self.limit = limit
        self.undo_stack = []
        self.redo_stack = []

    @property
    def can_undo(self):
        return bool(self.undo_stack)

    @property
    def can_redo(self):
        return bool(self.redo_stack)

    def snapshot(self, state):
        self.undo_stack.append(copy.deepcopy(state))
        if self.limit is not None and len(self.undo_stack) > self.limit:
            del self.undo_stack[0]
        self.redo_stack.clear()

    def undo(self, current):
        if not self.undo_stack:
            return None
        state = self.undo_stack.pop()
        self.redo_stack.append(copy.deepcopy(current))
        return state

    def redo(self, current):
        if not self.redo_stack:
            return None
        state = self.redo_stack.pop()
        self.undo_stack.append(copy.deepcopy(current))
        return state

    def clear(self):
        self.undo_stack.clear()
        self.redo_stack.clear()


def pop_last(items, count=1):
    """
    Single step undo for editors without redo: drop the last `count`
    appended values in place and return them ([] if there are too few).
    """
    if len(items) < count or count <= 0:
        return []
    removed = items[-count:]
    del items[-count:]
    return removed
