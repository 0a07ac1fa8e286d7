# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Modinha Struct
# ==============
#
# Small helpers for in-memory JSON-like data structures, shared by the
# traversal, mapping and model modules.
#
# - UNDEF: marker for a value that is not present at all (None is JSON null).
# - isnode, islist, ismap, isfunc: identify value kinds.
# - isempty: undefined values, None, empty strings, or empty nodes.
# - getprop: safely get a property value by key.
# - setprop: safely set a property value by key.
# - delprop: safely delete a property by key.
# - haskey: true if key value is present.
# - clone: copy a JSON-like data structure.
# - merge: merge nested maps, overriding values in earlier maps.
# - stringify: human-friendly string version of a value.


from typing import Any, List
import json


class _Undefined:
    "Marker for absent values. Falsy, and distinct from None."

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'UNDEF'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


# The standard undefined value for this package.
UNDEF = _Undefined()

S_MT = ''
S_DT = '.'


def isnode(val: Any = UNDEF) -> bool:
    "Value is a node - a map (dict) or list."
    return isinstance(val, (dict, list))


def ismap(val: Any = UNDEF) -> bool:
    "Value is a map (dict)."
    return isinstance(val, dict)


def islist(val: Any = UNDEF) -> bool:
    "Value is a list."
    return isinstance(val, list)


def isfunc(val: Any = UNDEF) -> bool:
    "Value is a function."
    return callable(val)


def isempty(val: Any = UNDEF) -> bool:
    "Check for an 'empty' value - UNDEF, None, empty string, list or map."
    if val is UNDEF or val is None:
        return True

    if val == S_MT:
        return True

    if isnode(val) and len(val) == 0:
        return True

    return False


def getprop(val: Any = UNDEF, key: Any = UNDEF, alt: Any = UNDEF) -> Any:
    """
    Safely get a property of a node. Undefined arguments return the
    alternative value, as does a missing key. List nodes accept integer
    keys, or strings that parse as integers.
    """
    if val is UNDEF or val is None or key is UNDEF or key is None:
        return alt

    if ismap(val):
        return val.get(key if key in val else str(key), alt)

    if islist(val):
        try:
            index = int(key)
        except (TypeError, ValueError):
            return alt

        if 0 <= index < len(val):
            return val[index]

    return alt


def haskey(val: Any = UNDEF, key: Any = UNDEF) -> bool:
    "Value of property with name key in node val is present (None counts)."
    return getprop(val, key) is not UNDEF


def setprop(parent: Any, key: Any, val: Any) -> Any:
    """
    Safely set a property on a dict or list.
    - If `val` is UNDEF, delete the key from parent.
    - For lists, an index past the end appends.
    """
    if val is UNDEF:
        return delprop(parent, key)

    if ismap(parent):
        parent[key if key in parent else str(key)] = val

    elif islist(parent):
        try:
            index = int(key)
        except (TypeError, ValueError):
            return parent

        if 0 <= index < len(parent):
            parent[index] = val
        elif index >= len(parent):
            parent.append(val)

    return parent


def delprop(parent: Any, key: Any) -> Any:
    """
    Delete a property from a dict or list. For lists, the element at the
    index is removed and remaining elements shift down.
    """
    if ismap(parent):
        if key in parent:
            del parent[key]
        elif str(key) in parent:
            del parent[str(key)]

    elif islist(parent):
        try:
            index = int(key)
        except (TypeError, ValueError):
            return parent

        if 0 <= index < len(parent):
            del parent[index]

    return parent


def clone(val: Any = UNDEF) -> Any:
    """
    Clone a JSON-like data structure. Maps and lists are copied
    recursively into plain dicts and lists.
    NOTE: function (and other object) references are copied, *not* cloned.
    """
    if ismap(val):
        return {k: clone(v) for k, v in val.items()}

    if islist(val):
        return [clone(v) for v in val]

    return val


def merge(objs: List[Any] = None) -> Any:
    """
    Merge a list of values into each other. Later values have
    precedence. Maps merge recursively. Lists and scalars replace
    whatever was there before, they do *not* merge. The first element
    is modified.
    """

    # Handle edge cases.
    if not islist(objs):
        return objs
    if len(objs) == 0:
        return UNDEF
    if len(objs) == 1:
        return objs[0]

    out = objs[0]

    for obj in objs[1:]:
        obj = clone(obj)

        if not ismap(obj) or not ismap(out):
            out = obj
            continue

        for key, val in obj.items():
            cur = out.get(key, UNDEF)
            if ismap(cur) and ismap(val):
                out[key] = merge([cur, val])
            else:
                out[key] = val

    return out


def stringify(val: Any, maxlen: int = UNDEF) -> str:
    "Safely stringify a value for printing (NOT JSON!)."

    valstr = S_MT

    if val is UNDEF:
        return valstr

    if isinstance(val, str):
        valstr = val
    else:
        try:
            valstr = json.dumps(val, sort_keys=True, separators=(',', ':'))
            valstr = valstr.replace('"', '')
        except (TypeError, ValueError):
            valstr = str(val)

    if maxlen is not UNDEF:
        full_len = len(valstr)
        valstr = valstr[:maxlen]

        if 3 < maxlen < full_len:
            valstr = valstr[:maxlen - 3] + '...'

    return valstr


__all__ = [
    'UNDEF',
    'clone',
    'delprop',
    'getprop',
    'haskey',
    'isempty',
    'isfunc',
    'islist',
    'ismap',
    'isnode',
    'merge',
    'setprop',
    'stringify',
]
