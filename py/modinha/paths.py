# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Modinha Paths
# =============
#
# Move data between differently-shaped objects using dotted property
# chains such as "a.b.c".
#
# - get_deep_property: get the value at a property chain.
# - set_deep_property: set the value at a property chain, creating maps.
# - map: copy values into a target, keyed by *target* path.
# - project: copy values into a target, keyed by *source* path.
# - select: copy exactly the listed paths, keeping their shape.
#
# A mapping table is a flat dict. For `map`, keys are target paths and
# values are source paths (or functions of the whole source). For
# `project` the same table is read in the other direction, so one table
# describes a translation both inbound and outbound.


from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Union

from .struct import (
    UNDEF,
    S_DT,
    getprop,
    isfunc,
    islist,
    isnode,
    setprop,
)


@dataclass(frozen=True)
class PathRef:
    "Mapping entry that reads a value from a dotted source path."
    path: str

    def chain(self) -> List[str]:
        return self.path.split(S_DT)


@dataclass(frozen=True)
class Computed:
    "Mapping entry that derives a value from the whole source object."
    fn: Callable[[Any], Any]

    def __call__(self, source: Any) -> Any:
        return self.fn(source)


MappingEntry = Union[PathRef, Computed]


def as_entry(value: Any) -> MappingEntry:
    "Tag a raw mapping table value."
    if isinstance(value, (PathRef, Computed)):
        return value
    if isinstance(value, str):
        return PathRef(value)
    if isfunc(value):
        return Computed(value)
    raise TypeError(f'Mapping entry must be a path or a function, not {value!r}')


def _chain(path: Any) -> List[str]:
    if islist(path):
        return path[:]
    if isinstance(path, PathRef):
        return path.chain()
    return str(path).split(S_DT)


def get_deep_property(source: Any, chain: Any) -> Any:
    """
    Get the value at the end of a property chain. Returns UNDEF as soon
    as a segment is missing, and None if an intermediate value is None.
    """
    chain = _chain(chain)
    if len(chain) == 0:
        return source

    key = chain.pop(0)
    value = getprop(source, key)

    # there's nothing to see here, move along
    if value is UNDEF:
        return UNDEF

    # we're at the end of the line, this is the value you're looking for
    if len(chain) == 0:
        return value

    if value is None:
        return None

    return get_deep_property(value, chain)


def set_deep_property(target: Any, chain: Any, value: Any) -> Any:
    "Set a value at the end of a property chain, creating maps on the way."
    chain = _chain(chain)
    if len(chain) == 0:
        return target

    key = chain.pop(0)

    if len(chain) == 0:
        setprop(target, key, value)
    else:
        child = getprop(target, key)
        if not isnode(child):
            child = {}
            setprop(target, key, child)
        set_deep_property(child, chain, value)

    return target


def map(mapping: Dict[str, Any], source: Any, target: Any) -> Any:
    """
    Copy values from source to target. Mapping keys are target paths;
    values are source paths, or functions called with the whole source
    whose (truthy) result is assigned.
    """
    for path, entry in mapping.items():
        entry = as_entry(entry)

        if isinstance(entry, Computed):
            value = entry(source)
            if value:
                set_deep_property(target, path, value)
        else:
            value = get_deep_property(source, entry.chain())
            if value is not UNDEF:
                set_deep_property(target, path, value)

    return target


def project(mapping: Dict[str, Any], source: Any, target: Any) -> Any:
    """
    Copy values from source to target, reading the mapping in reverse:
    keys are source paths and values are target paths. Computed entries
    have no source path and are ignored.
    """
    for path, entry in mapping.items():
        entry = as_entry(entry)

        if isinstance(entry, Computed):
            continue

        value = get_deep_property(source, path)
        if value is not UNDEF:
            set_deep_property(target, entry.chain(), value)

    return target


def select(paths: List[str], source: Any, target: Any) -> Any:
    """
    Copy a subset of source onto target. A selection is shorthand for a
    mapping in which each path maps to itself:

        select(['b.c', 'd'], {'a': 'a', 'b': {'c': 'c'}, 'd': 'd'}, {})
        # {'b': {'c': 'c'}, 'd': 'd'}
    """
    mapping = {path: path for path in paths}
    return map(mapping, source, target)


__all__ = [
    'Computed',
    'PathRef',
    'as_entry',
    'get_deep_property',
    'map',
    'project',
    'select',
    'set_deep_property',
]
