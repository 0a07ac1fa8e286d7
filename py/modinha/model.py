# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Modinha Model
# =============
#
# Model definitions are subclasses of Model. Each one owns its schema,
# unique id property name, named mappings, lifecycle hooks and default
# generators. A derived definition gets deep copies of its parent's
# tables, merged with its own, so nothing mutable is ever shared along a
# derivation chain.
#
# - define: new definition from a schema (and optional collection).
# - inherit: new definition from instance and static extensions.
# - extend: mix instance and static members into a definition in place.
#
# Instances are dicts (see traversal.Record), populated from source data
# by schema traversal.


from typing import Any, Callable, Dict, Optional
import inspect
import json
import logging
import re
import types

from . import paths
from . import traversal
from . import validation
from .backend import MemoryBackend
from .collection import ModelCollection
from .defaults import random, timestamp, uuid
from .struct import (
    UNDEF,
    clone,
    isempty,
    islist,
    ismap,
    merge as merge_nodes,
)


logger = logging.getLogger(__name__)

# Schema properties added to definitions that keep timestamps.
TIMESTAMPS = ('created', 'modified')


class UndefinedSchemaError(Exception):
    "Raised when a definition derives directly from Model without a schema."

    def __init__(self, message: str = 'Model inheritance requires a schema definition'):
        self.name = 'UndefinedSchemaError'
        self.message = message
        super().__init__(message)


class hybridmethod:
    """
    A method with separate class-level and instance-level bodies:

        @hybridmethod
        def validate(cls, data): ...

        @validate.instancemethod
        def validate(self): ...
    """

    def __init__(self, fclass: Callable, finstance: Optional[Callable] = None):
        self.fclass = fclass
        self.finstance = finstance
        self.__doc__ = fclass.__doc__

    def instancemethod(self, finstance: Callable) -> 'hybridmethod':
        return type(self)(self.fclass, finstance)

    def __get__(self, instance, owner):
        if instance is None or self.finstance is None:
            return types.MethodType(self.fclass, owner)
        return types.MethodType(self.finstance, instance)


def serialize(obj: Any) -> str:
    return json.dumps(obj)


def deserialize(data: str) -> Any:
    try:
        return json.loads(data)
    except (TypeError, ValueError) as err:
        raise ValueError('failed to parse JSON') from err


def _is_behavior(value: Any) -> bool:
    return isinstance(value, (types.FunctionType, classmethod, staticmethod, property, hybridmethod))


def _statics(klass) -> Dict[str, Any]:
    "Data attributes defined directly on a class."
    return {
        key: value for key, value in vars(klass).items()
        if not key.startswith('_') and not _is_behavior(value)
    }


def _inherited(cls, key: str) -> Any:
    for klass in cls.__mro__[1:]:
        if key in vars(klass):
            return vars(klass)[key]
    return UNDEF


def _prototype_member(value: Any) -> Any:
    if isinstance(value, types.FunctionType):
        return value
    return clone(value)


def _static_member(value: Any) -> Any:
    if isinstance(value, types.FunctionType):
        return classmethod(value)
    return clone(value)


def _donor(klass):
    "Split a donor class into instance and static members."
    proto, static = {}, {}
    for key, value in vars(klass).items():
        if key.startswith('_') or key == 'backend':
            continue
        if isinstance(value, types.FunctionType):
            proto[key] = value
        else:
            static[key] = value
    return proto, static


def _combine(key: str, current: Dict[str, Any], value: Dict[str, Any]) -> Dict[str, Any]:
    "Merge a static table given on both sides. Schema descriptors are replaced whole."
    if key == 'schema':
        combined = clone(current)
        combined.update(clone(value))
        return combined
    return merge_nodes([clone(current), value])


def _classname(collection: str) -> str:
    parts = re.split(r'[^0-9A-Za-z]+', collection)
    return ''.join(part[:1].upper() + part[1:] for part in parts if part)


class Model(traversal.Record):

    schema = None
    unique_id = '_id'
    collection = None
    mappings = {}
    hooks = {}
    defaults = {
        'uuid': uuid,
        'random': random,
        'timestamp': timestamp,
    }
    adapter = MemoryBackend
    backend = None
    timestamps = True

    def __init__(self, data: Any = None, options: Dict[str, Any] = None):
        super().__init__()
        self.initialize(data, options)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        own = dict(vars(cls))

        if Model in cls.__bases__ and own.get('schema') is None:
            raise UndefinedSchemaError()

        names = set()
        for klass in cls.__mro__:
            if issubclass(klass, Model):
                names.update(_statics(klass))

        # Copy every inherited table; merge the ones defined on both sides.
        for key in names:
            inherited = _inherited(cls, key)
            value = own.get(key, UNDEF)

            if value is UNDEF:
                setattr(cls, key, clone(inherited))
            elif ismap(value) and ismap(inherited):
                setattr(cls, key, _combine(key, inherited, value))
            else:
                setattr(cls, key, clone(value))

        if cls.timestamps is True and ismap(cls.schema):
            for key in TIMESTAMPS:
                cls.schema.setdefault(key, {'type': 'any'})

        cls._resolve_unique_id()

        if 'backend' not in own and cls.adapter is not None:
            cls.backend = cls.adapter(cls.collection)

        logger.debug('Defined model %s (unique id: %s)', cls.__name__, cls.unique_id)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({dict.__repr__(self)})'

    @classmethod
    def _resolve_unique_id(cls) -> None:
        # only non-nested properties can be the unique id
        flagged = [
            key for key, descriptor in (cls.schema or {}).items()
            if ismap(descriptor)
            and not ismap(descriptor.get('properties'))
            and descriptor.get('uniqueId')
        ]

        if len(flagged) == 1:
            cls.unique_id = flagged[0]
        elif len(flagged) > 1:
            logger.warning('Model %s flags several unique ids (%s); keeping %s',
                           cls.__name__, ', '.join(flagged), cls.unique_id)

    # Inheritance
    # ===========

    @classmethod
    def define(cls, collection: Any = None, schema: Dict[str, Any] = None, name: str = None):
        """
        Most definitions need nothing but a schema and perhaps a
        collection name:

            User = Model.define('users', {'email': {'type': 'string'}})
            Point = Model.define({'x': {'type': 'number'}})
        """
        if schema is None and not isinstance(collection, str):
            schema, collection = collection, None

        static = {'schema': schema}
        if collection is not None:
            static['collection'] = collection
            name = name or _classname(collection)

        return cls.inherit(None, static, name=name)

    @classmethod
    def inherit(cls, proto: Dict[str, Any] = None, static: Dict[str, Any] = None, name: str = None):
        """
        Create a new definition derived from this one. Functions in
        `proto` become instance methods and functions in `static` become
        classmethods; a name given a function in both gets a
        hybridmethod. Other values become class attributes. Tables such
        as `schema` and `mappings` are merged with the parent's copies.
        """
        namespace = {}

        for key, value in (proto or {}).items():
            namespace[key] = _prototype_member(value)

        for key, value in (static or {}).items():
            member = _static_member(value)
            if isinstance(value, types.FunctionType) and isinstance(namespace.get(key), types.FunctionType):
                member = hybridmethod(value, namespace[key])
            namespace[key] = member

        return type(name or cls.__name__, (cls,), namespace)

    @classmethod
    def extend(cls, *args):
        """
        Mix members into this definition in place, either from another
        class or from explicit `proto` and `static` dicts. Nested static
        dicts are merged. A `__post_extend__` classmethod, if defined,
        runs afterwards.
        """
        if args and inspect.isclass(args[0]):
            proto, static = _donor(args[0])
        else:
            proto = args[0] if len(args) > 0 else None
            static = args[1] if len(args) > 1 else None

        for key, value in (proto or {}).items():
            setattr(cls, key, _prototype_member(value))

        for key, value in (static or {}).items():
            current = getattr(cls, key, UNDEF)
            if ismap(value) and ismap(current):
                setattr(cls, key, _combine(key, current, value))
            else:
                setattr(cls, key, _static_member(value))

        cls._resolve_unique_id()

        post_extend = getattr(cls, '__post_extend__', None)
        if callable(post_extend):
            post_extend()

        return cls

    # Initialization
    # ==============

    @hybridmethod
    def initialize(cls, data: Any = None, options: Dict[str, Any] = None):
        """
        Build instances from loosely-typed data. Strings are parsed as
        JSON first, and lists give a list of instances (or just the
        first, with the `first` option). With the `nullify` option,
        empty data gives None instead of an empty instance, which is
        handy for empty database responses.
        """
        options = options or {}

        if not data and options.get('nullify'):
            return None

        if isinstance(data, str):
            return cls.initialize(cls.deserialize(data), options)

        if islist(data):
            if options.get('first'):
                return cls.initialize(data[0] if data else None, options)
            return [cls.initialize(item, options) for item in data]

        return cls(data or {}, options)

    @initialize.instancemethod
    def initialize(self, data: Any = None, options: Dict[str, Any] = None):
        """
        Copy properties from data onto this instance, using the schema
        as a whitelist. A named `mapping` option is resolved against the
        definition's mappings.
        """
        options = dict(options or {})

        if isinstance(options.get('mapping'), str):
            options['mapping'] = self.mappings[options['mapping']]

        traversal.initialize(self.schema, data, self, options)
        return self

    def merge(self, data: Any, options: Dict[str, Any] = None):
        "Initialize from data without assigning defaults."
        options = dict(options or {})
        options['defaults'] = False
        return self.initialize(data, options)

    @staticmethod
    def serialize(obj: Any) -> str:
        return serialize(obj)

    @staticmethod
    def deserialize(data: str) -> Any:
        return deserialize(data)

    @classmethod
    def collect(cls, data: Any = None, options: Dict[str, Any] = None) -> ModelCollection:
        return ModelCollection(cls, data, options)

    # Mapping
    # =======

    @hybridmethod
    def project(cls, source: Any, target: Any, mapping: Any):
        if isinstance(mapping, str):
            mapping = cls.mappings[mapping]

        paths.project(mapping, source, target)
        return target

    @project.instancemethod
    def project(self, mapping: Any):
        if isinstance(mapping, str):
            mapping = self.mappings[mapping]

        return paths.project(mapping, self, {})

    # Validation
    # ==========

    @hybridmethod
    def validate(cls, data: Any) -> validation.ValidationError:
        return validation.validate(data, cls.schema)

    @validate.instancemethod
    def validate(self) -> validation.ValidationError:
        return validation.validate(self, self.schema)

    # Hooks
    # =====

    @classmethod
    def before(cls, event: str, fn: Callable) -> None:
        "Register a hook for an event; hooks run in registration order."
        cls.hooks.setdefault(event, []).append(fn)

    @classmethod
    def run_hooks(cls, event: str, instance: Any, attrs: Any = None) -> None:
        for fn in cls.hooks.get(event, []):
            fn(instance, attrs)

    # Persistence
    # ===========
    #
    # Callbacks are error-first: callback(err, result).

    @classmethod
    def _from_document(cls, doc: Dict[str, Any], options: Dict[str, Any]):
        instance = cls(doc, options)
        key = cls.unique_id
        if key and key in doc and key not in instance:
            instance[key] = doc[key]
        return instance

    @classmethod
    def create(cls, attrs: Any, callback: Callable, options: Dict[str, Any] = None) -> None:
        options = {'private': True, **(options or {})}
        instance = cls(attrs, options)

        if cls.unique_id and isempty(instance.get(cls.unique_id)):
            instance[cls.unique_id] = cls.backend.create_id()

        cls.run_hooks('validate', instance, attrs)

        result = instance.validate()
        if not result.valid:
            return callback(result, None)

        if cls.timestamps is True:
            now = timestamp()
            instance['created'] = now
            instance['modified'] = now

        cls.run_hooks('create', instance, attrs)

        def saved(err, doc=None):
            if err:
                return callback(err, None)
            cls.run_hooks('complete', instance, attrs)
            callback(None, instance)

        cls.backend.save(instance, saved)

    @classmethod
    def find(cls, conditions: Dict[str, Any], callback: Callable, options: Dict[str, Any] = None) -> None:
        options = options or {}

        def found(err, data=None):
            if err:
                return callback(err, None)
            if data is None:
                return callback(None, None)
            if islist(data):
                return callback(None, [cls._from_document(doc, options) for doc in data])
            callback(None, cls._from_document(data, options))

        cls.backend.find(conditions or {}, found, options)

    @classmethod
    def modify(cls, conditions: Dict[str, Any], attrs: Any, callback: Callable,
               options: Dict[str, Any] = None) -> None:
        options = options or {}

        def found(err, instance=None):
            if err:
                return callback(err, None)
            if islist(instance):
                instance = instance[0] if instance else None
            if instance is None:
                return callback(None, None)

            instance.merge(attrs, options)
            cls.run_hooks('validate', instance, attrs)

            result = instance.validate()
            if not result.valid:
                return callback(result, None)

            if cls.timestamps is True:
                instance['modified'] = timestamp()

            cls.run_hooks('update', instance, attrs)

            def updated(err, doc=None):
                if err:
                    return callback(err, None)
                cls.run_hooks('complete', instance, attrs)
                callback(None, instance)

            cls.backend.update(conditions, instance, updated)

        cls.find(conditions, found, options)

    @classmethod
    def destroy(cls, conditions: Dict[str, Any], callback: Callable) -> None:
        cls.backend.destroy(conditions, lambda err, result=None: callback(err))


__all__ = [
    'Model',
    'UndefinedSchemaError',
    'deserialize',
    'hybridmethod',
    'serialize',
]
