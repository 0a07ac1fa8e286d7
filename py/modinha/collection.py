# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# An ordered group of model instances that remembers its model, so that
# named mappings can be resolved when projecting.


from typing import Any, Dict, Iterator, List, Optional, Union

from .paths import project
from .struct import islist


class ModelCollection:

    def __init__(self, model, data: Optional[List[Any]] = None, options: Dict[str, Any] = None):
        self.model = model
        self._items = []

        if islist(data):
            for item in data:
                self.append(item, options)

    def append(self, item: Any, options: Dict[str, Any] = None) -> None:
        if not isinstance(item, self.model):
            item = self.model.initialize(item, options)
        self._items.append(item)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.model.__name__}, {self._items!r})'

    def project(self, mapping: Union[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Project every instance through a mapping, named or inline, and
        return the results as a new list of plain dicts.
        """
        if isinstance(mapping, str):
            mapping = self.model.mappings[mapping]

        return [project(mapping, item, {}) for item in self._items]


__all__ = [
    'ModelCollection',
]
