# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Modinha Backend
# ===============
#
# The persistence adapter boundary. Every operation reports through an
# error-first callback: callback(err, result).
#
# MemoryBackend is the in-memory reference adapter, used as the default
# and in tests.


from typing import Any, Callable, Dict, Optional
import logging
import secrets

from .paths import get_deep_property
from .struct import clone


logger = logging.getLogger(__name__)

Callback = Callable[..., None]


class Backend:
    "Adapter contract between model definitions and a store."

    def __init__(self, collection: Optional[str] = None, options: Dict[str, Any] = None):
        self.collection = collection
        self.options = options or {}

    def create_id(self) -> str:
        "Generate a document id."
        return secrets.token_hex(10)

    def save(self, doc: Dict[str, Any], callback: Callback) -> None:
        raise NotImplementedError

    def find(self, conditions: Dict[str, Any], callback: Callback, options: Dict[str, Any] = None) -> None:
        raise NotImplementedError

    def update(self, conditions: Dict[str, Any], attrs: Dict[str, Any], callback: Callback) -> None:
        raise NotImplementedError

    def destroy(self, conditions: Dict[str, Any], callback: Callback) -> None:
        raise NotImplementedError


class MemoryBackend(Backend):
    "Documents held in a list. Stored documents are copies."

    def __init__(self, collection: Optional[str] = None, options: Dict[str, Any] = None):
        super().__init__(collection, options)
        self.reset()

    def reset(self) -> None:
        "Drop every document (used for testing)."
        self.documents = []

    def _match(self, doc: Dict[str, Any], conditions: Dict[str, Any]) -> bool:
        return all(get_deep_property(doc, path) == value for path, value in conditions.items())

    def _first(self, conditions: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return next((doc for doc in self.documents if self._match(doc, conditions)), None)

    def save(self, doc, callback):
        stored = clone(dict(doc))
        self.documents.append(stored)
        logger.debug('Saved document to %s', self.collection)
        callback(None, clone(stored))

    def find(self, conditions, callback, options=None):
        if not conditions:
            return callback(None, [clone(doc) for doc in self.documents])

        doc = self._first(conditions)
        callback(None, clone(doc) if doc is not None else None)

    def update(self, conditions, attrs, callback):
        doc = self._first(conditions)
        if doc is None:
            return callback(None, None)

        doc.update(clone(dict(attrs)))
        logger.debug('Updated document in %s', self.collection)
        callback(None, clone(doc))

    def destroy(self, conditions, callback):
        doc = self._first(conditions)
        if doc is not None:
            self.documents = [d for d in self.documents if d is not doc]
            logger.debug('Destroyed document in %s', self.collection)
        callback(None, None)


__all__ = [
    'Backend',
    'MemoryBackend',
]
