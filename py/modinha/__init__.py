# modinha init

from .backend import (
    Backend,
    MemoryBackend
)

from .collection import (
    ModelCollection
)

from .defaults import (
    random,
    timestamp,
    uuid
)

from .model import (
    Model,
    UndefinedSchemaError,
    deserialize,
    hybridmethod,
    serialize
)

from .paths import (
    Computed,
    PathRef,
    get_deep_property,
    map,
    project,
    select,
    set_deep_property
)

from .struct import (
    UNDEF,
    clone
)

from .traversal import (
    Generator,
    Literal,
    Record,
    assign,
    initialize,
    traverse
)

from .validation import (
    ValidationError,
    constraints,
    validate
)


__all__ = [
    'Backend',
    'Computed',
    'Generator',
    'Literal',
    'MemoryBackend',
    'Model',
    'ModelCollection',
    'PathRef',
    'Record',
    'UNDEF',
    'UndefinedSchemaError',
    'ValidationError',
    'assign',
    'clone',
    'constraints',
    'deserialize',
    'get_deep_property',
    'hybridmethod',
    'initialize',
    'map',
    'project',
    'random',
    'select',
    'serialize',
    'set_deep_property',
    'timestamp',
    'traverse',
    'uuid',
    'validate',
]
