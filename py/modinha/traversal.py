# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Modinha Traversal
# =================
#
# Copy values from loosely-structured source data onto a target, driven
# by a schema. The schema is a whitelist: keys it does not describe are
# never copied.
#
# - traverse: walk a schema depth-first, invoking an operation per leaf.
# - assign: the per-property rules (privacy, immutability, setters,
#   defaults, trimming, unset, after hooks).
# - initialize: traverse, or map/select when those options are given.
#
# Options are a plain dict:
#   private   include descriptors flagged private.
#   defaults  set to False to skip default values.
#   $unset    list of keys to delete from the target.
#   mapping   mapping table, used instead of the schema.
#   select    list of paths, used instead of the schema.


from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .paths import map, select
from .struct import (
    UNDEF,
    clone,
    getprop,
    haskey,
    isempty,
    isfunc,
    islist,
    ismap,
)


S_string = 'string'
S_array = 'array'


@dataclass(frozen=True)
class Literal:
    "Default that is a fixed value. Each resolution gets its own copy."
    value: Any

    def resolve(self) -> Any:
        return clone(self.value)


@dataclass(frozen=True)
class Generator:
    "Default produced by calling a zero-argument function."
    fn: Callable[[], Any]

    def resolve(self) -> Any:
        return self.fn()


def as_default(value: Any):
    "Tag a raw `default` descriptor value."
    if isinstance(value, (Literal, Generator)):
        return value
    if isfunc(value):
        return Generator(value)
    return Literal(value)


class Record(dict):
    """
    A dict whose immutable keys can be locked. Once a key is locked and
    holds a value, item assignment and deletion are rejected.
    """

    _locked = frozenset()

    def lock(self, key: str) -> None:
        self._locked = self._locked | {key}

    def unlock(self, key: str) -> None:
        self._locked = self._locked - {key}

    def is_locked(self, key: str) -> bool:
        return key in self._locked

    def _check(self, key: str) -> None:
        if key in self._locked and dict.__contains__(self, key):
            raise TypeError(f"Property '{key}' is immutable")

    def __setitem__(self, key, value):
        self._check(key)
        super().__setitem__(key, value)

    def __delitem__(self, key):
        self._check(key)
        super().__delitem__(key)

    def pop(self, key, *args):
        self._check(key)
        return super().pop(key, *args)

    def popitem(self):
        if self:
            self._check(next(reversed(self)))
        return super().popitem()

    def clear(self):
        for key in self._locked:
            self._check(key)
        super().clear()

    def setdefault(self, key, default=None):
        if key not in self:
            self[key] = default
        return self[key]

    def update(self, *args, **kwargs):
        items = dict(*args, **kwargs)

        # all or nothing
        for key in items:
            self._check(key)

        for key, value in items.items():
            super().__setitem__(key, value)

    def __ior__(self, other):
        self.update(other)
        return self


def _locked(target: Any, key: str) -> bool:
    return isinstance(target, Record) and target.is_locked(key)


def _store(target: Any, key: str, value: Any) -> bool:
    # Locked keys keep their value.
    if _locked(target, key):
        return False
    target[key] = value
    return True


def _discard(target: Any, key: str) -> None:
    if isinstance(target, Record):
        target.unlock(key)
    target.pop(key, None)


def _typed(descriptor: Dict[str, Any], name: str) -> bool:
    kind = descriptor.get('type')
    if islist(kind):
        return name in kind
    return kind == name


def _trim(value: Any, trim: Any) -> Any:
    if trim is True:
        leading, trailing = True, True
    else:
        leading = bool(getprop(trim, 'leading', False))
        trailing = bool(getprop(trim, 'trailing', False))

    def strip(s):
        if not isinstance(s, str):
            return s
        if leading:
            s = s.lstrip()
        if trailing:
            s = s.rstrip()
        return s

    if islist(value):
        return [strip(item) for item in value]
    return strip(value)


def traverse(
        schema: Dict[str, Any],
        source: Any,
        target: Any,
        options: Optional[Dict[str, Any]] = None,
        operation: Optional[Callable] = None
) -> Any:
    """
    Recursively iterate through a schema and invoke an operation on
    each leaf property. A descriptor with `properties` is a nested
    schema: the matching sub-objects of source and target are walked in
    turn, creating the target sub-object when needed.
    """
    options = options or {}
    operation = operation or assign

    for key, descriptor in schema.items():

        # Recurse if the property is a nested schema.
        if ismap(descriptor) and ismap(descriptor.get('properties')):
            nested_source = getprop(source, key)
            if not ismap(nested_source):
                nested_source = {}

            nested_target = getprop(target, key)
            if not ismap(nested_target):
                nested_target = Record()
                _store(target, key, nested_target)

            traverse(
                descriptor['properties'],
                nested_source,
                nested_target,
                options,
                operation
            )

        # Invoke the operation for this property.
        else:
            operation(key, descriptor, source, target, options)

    return target


def assign(
        key: str,
        descriptor: Dict[str, Any],
        source: Any,
        target: Any,
        options: Dict[str, Any]
) -> None:
    """
    Set one property on target based on its descriptor, the value
    found under the same key in source, and the options. Missing or
    odd data never raises: the property is just left unset, or given
    its default.
    """
    descriptor = descriptor or {}

    if descriptor.get('private') and not options.get('private'):
        return

    value = getprop(source, key)
    immutable = descriptor.get('immutable')
    setter = descriptor.get('set')
    assigned = False

    # immutable values win over setters
    if immutable and not isempty(value):
        assigned = _store(target, key, value)

    # computed property
    elif isfunc(setter):
        if not _locked(target, key):
            setter(target, source)
            assigned = haskey(target, key)

    # simple assignment
    elif value is not UNDEF:
        assigned = _store(target, key, value)

    # default value
    elif 'default' in descriptor and options.get('defaults') is not False:
        if not _locked(target, key):
            assigned = _store(target, key, as_default(descriptor['default']).resolve())

    trim = descriptor.get('trim')
    if trim and haskey(target, key) and not _locked(target, key):
        current = target[key]
        if (isinstance(current, str) and _typed(descriptor, S_string)) or \
           (islist(current) and _typed(descriptor, S_array)):
            target[key] = _trim(current, trim)

    if immutable and isinstance(target, Record) and not isempty(target.get(key)):
        target.lock(key)

    if key in (options.get('$unset') or ()):
        _discard(target, key)

    after = descriptor.get('after')
    if assigned and isfunc(after):
        after(target, source)


def initialize(
        schema: Dict[str, Any],
        source: Any,
        target: Any,
        options: Optional[Dict[str, Any]] = None
) -> Any:
    """
    Copy properties from source onto target. By default the schema is
    the whitelist. With a `mapping` option, values are copied through
    the mapping table instead; with `select`, only the listed paths are
    copied, keeping their shape.
    """
    if not source:
        source = {}
    options = options or {}

    if options.get('mapping'):
        map(options['mapping'], source, target)

    elif options.get('select'):
        select(options['select'], source, target)

    else:
        traverse(schema or {}, source, target, options)

    return target


__all__ = [
    'Generator',
    'Literal',
    'Record',
    'as_default',
    'assign',
    'initialize',
    'traverse',
]
