# annotator_core/templates.py
"""
Skeleton templates: reusable keypoint/connection rigs stored with
coordinates normalized to the canvas they were drawn on.

The library keeps every template in one JSON array under a single key of a
small key-value store. Saving and deleting read the whole list, change it
and write it back.
"""

import json
import os

from .config import get_config
from .exceptions import MissingNameError
from .geometry import normalize
from .ids import new_id
from .linking import add_connection
from .logger import get_logger
from .models import Connection, Keypoint, SkeletonTemplate, TemplateKeypoint, VISIBILITY_VISIBLE

logger = get_logger(__name__)


class MemoryStore:
    """Key-value store held in memory; values are strings."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def read(self, key):
        return self.data.get(key)

    def write(self, key, value):
        self.data[key] = value


class JsonFileStore:
    """Key-value store backed by one JSON object on disk; values are strings."""

    def __init__(self, path):
        self.path = str(path)

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Store {self.path} is unreadable, starting empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def read(self, key):
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key, value):
        data = self._load()
        data[key] = value
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)


class SkeletonLibrary:
    def __init__(self, store=None, key=None):
        config = get_config()
        self.store = store if store is not None else JsonFileStore(config.store_path)
        self.key = key or config.template_key

    def load(self):
        """All stored templates; [] if the slot is missing or corrupt."""
        raw = self.store.read(self.key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except ValueError:
            logger.warning(f"Template slot {self.key!r} is not valid JSON, ignoring it")
            return []
        if not isinstance(records, list):
            logger.warning(f"Template slot {self.key!r} does not hold a list, ignoring it")
            return []
        templates = []
        for record in records:
            try:
                templates.append(SkeletonTemplate.from_dict(record))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.debug(f"Skipping malformed template record {record!r:.80}")
        return templates

    def _write(self, templates):
        self.store.write(self.key, json.dumps([t.to_dict() for t in templates]))

    def names(self):
        return [t.name for t in self.load()]

    def get(self, template_id):
        for template in self.load():
            if template.id == template_id:
                return template
        return None

    def save(self, name, keypoints, connections, template_id=None):
        """
        Insert or replace (by id) a template and return it.

        keypoints: TemplateKeypoint objects with normalized coordinates.
        Raises MissingNameError, without touching the store, if name is blank.
        """
        if not isinstance(name, str) or not name.strip():
            raise MissingNameError(template_id=template_id)
        template = SkeletonTemplate(
            name,
            [TemplateKeypoint(kp.x, kp.y, kp.name, kp.id) for kp in keypoints],
            [Connection(c.source, c.target) for c in connections],
            template_id,
        )
        templates = [t for t in self.load() if t.id != template.id]
        templates.append(template)
        self._write(templates)
        logger.info(f"Saved skeleton {name!r} ({len(template.keypoints)} keypoints)")
        return template

    def delete(self, template_id):
        templates = self.load()
        kept = [t for t in templates if t.id != template_id]
        if len(kept) == len(templates):
            return False
        self._write(kept)
        logger.info(f"Deleted skeleton {template_id}")
        return True


def template_keypoints_from(keypoints, width, height):
    """Canvas keypoints -> TemplateKeypoints normalized by the canvas size (not clamped)."""
    return [
        TemplateKeypoint(normalize(kp.x, width), normalize(kp.y, height), kp.name, kp.id)
        for kp in keypoints
    ]


def instantiate_template(template, width, height):
    """
    Materialize a template on a canvas of the given size.

    Every keypoint gets a fresh id; connections are translated through the
    old -> new id map and dropped if an endpoint is unknown, if they link a
    keypoint to itself or if they repeat an earlier pair in either
    direction. The template itself is left unchanged.
    """
    id_map = {}
    keypoints = []
    for stored in template.keypoints:
        kp = Keypoint(stored.x * width, stored.y * height, stored.name, VISIBILITY_VISIBLE, new_id())
        id_map[stored.id] = kp.id
        keypoints.append(kp)
    connections = []
    for c in template.connections:
        if c.source in id_map and c.target in id_map:
            add_connection(connections, id_map[c.source], id_map[c.target])
    return keypoints, connections
