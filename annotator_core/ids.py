# annotator_core/ids.py
"""
Opaque identifiers for keypoints, shapes, boxes and templates.

Everything in the package calls new_id(); tests swap the factory for
SequentialIds to get predictable values.
"""

import itertools
import uuid
from contextlib import contextmanager


class IdFactory:
    """Random UUID4 strings."""

    def __call__(self):
        return str(uuid.uuid4())


class SequentialIds(IdFactory):
    """Deterministic ids: prefix-1, prefix-2, ..."""

    def __init__(self, prefix="id"):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self):
        return f"{self.prefix}-{next(self._counter)}"


_factory = IdFactory()


def new_id():
    return _factory()


def set_id_factory(factory):
    """Install `factory` and return the previous one."""
    global _factory
    previous = _factory
    _factory = factory
    return previous


@contextmanager
def use_id_factory(factory):
    previous = set_id_factory(factory)
    try:
        yield factory
    finally:
        set_id_factory(previous)
