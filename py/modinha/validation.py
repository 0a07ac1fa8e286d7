# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Modinha Validation
# ==================
#
# Validate data against a model schema. Structural checks (presence,
# type, format) are delegated to jsonschema; the schema descriptors are
# translated into JSON Schema constraints first, dropping the keys that
# only mean something to traversal.
#
# The jsonschema errors are reshaped into a dict keyed by property path,
# and wrapped in a ValidationError value. The ValidationError is
# returned, not raised, so callers can branch on `valid`.


from typing import Any, Dict, List
import logging
import re

from jsonschema import Draft7Validator, FormatChecker

from .struct import (
    isfunc,
    islist,
    ismap,
    stringify,
)


logger = logging.getLogger(__name__)


# Descriptor keys that are not JSON Schema keywords.
MODEL_KEYWORDS = frozenset([
    'after',
    'default',
    'immutable',
    'private',
    'properties',
    'required',
    'set',
    'trim',
    'uniqueId',
])

S_any = 'any'


# Compact (22 hex chars) or canonical 8-4-4-4-12 form.
UUID_FORMAT = re.compile(
    r'^(?:[0-9a-f]{22}|[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$',
    re.IGNORECASE
)

# Scheme or www prefix, then any host label (localhost and bare hostnames
# included), optional port, path, query and fragment.
URL_FORMAT = re.compile(
    r'^(?:[A-Za-z][A-Za-z0-9+.\-]{1,8}:(?://)?|www\.)'
    r'(?:[-;:&=+$,\w]+@)?'
    r'[A-Za-z0-9.\-]+'
    r'(?::\d+)?'
    r'(?:/[+~%/.\w\-]*)?'
    r'(?:\?[-+=&;%@.\w]*)?'
    r'(?:#[.!/\\\w]*)?$'
)


format_checker = FormatChecker()


@format_checker.checks('uuid')
def is_uuid(value: Any) -> bool:
    if not isinstance(value, str):
        return True
    return UUID_FORMAT.match(value) is not None


@format_checker.checks('url')
def is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return True
    return URL_FORMAT.match(value) is not None


def _constraint(descriptor: Any) -> Dict[str, Any]:
    if not ismap(descriptor):
        return {}

    out = {}
    for key, val in descriptor.items():
        if key in MODEL_KEYWORDS or isfunc(val):
            continue
        if key == 'type' and val == S_any:
            continue
        out[key] = val

    if ismap(descriptor.get('properties')):
        out.update(constraints(descriptor['properties']))
        if islist(descriptor.get('required')):
            out['required'] = descriptor['required']

    return out


def constraints(schema: Dict[str, Any]) -> Dict[str, Any]:
    "Translate a model schema into a JSON Schema object constraint."
    properties = {}
    required = []

    for key, descriptor in (schema or {}).items():
        properties[key] = _constraint(descriptor)
        if ismap(descriptor) and descriptor.get('required') is True:
            required.append(key)

    out = {'properties': properties}
    if required:
        out['required'] = required
    return out


def _property(error) -> str:
    path = [str(part) for part in error.absolute_path]

    # jsonschema reports missing properties against the parent object.
    if error.validator == 'required':
        instance = error.instance if ismap(error.instance) else {}
        missing = [name for name in error.validator_value if name not in instance]
        name = next((m for m in missing if repr(m) in error.message), None)
        if name is None and missing:
            name = missing[0]
        if name is not None:
            path.append(name)

    return '.'.join(path)


def _message(error) -> str:
    attribute = error.validator
    expected = error.validator_value

    if attribute == 'required':
        return 'is required'

    if attribute == 'type':
        kinds = expected if islist(expected) else [expected]
        return 'must be of ' + ' or '.join(str(k) for k in kinds) + ' type'

    if attribute == 'format':
        return f'is not a valid {expected}'

    return error.message


def _describe(error) -> Dict[str, Any]:
    return {
        'property': _property(error),
        'attribute': error.validator,
        'message': _message(error),
        'expected': error.validator_value,
        'actual': None if error.validator == 'required' else error.instance,
    }


class ValidationError(Exception):
    """
    Result of validating data against a schema. `errors` is keyed by
    property path; `message` joins one sentence per failing property.
    """

    status_code = 400

    def __init__(self, valid: bool = True, errors: Dict[str, Any] = None):
        self.name = 'ValidationError'
        self.valid = valid
        self.errors = errors or {}
        self.message = ' '.join(self._messages())
        super().__init__(self.message)

    def _messages(self) -> List[str]:
        messages = []

        for key, error in self.errors.items():
            attribute = error.get('attribute')
            message = error.get('message')

            if attribute in ('required', 'type'):
                messages.append(f'"{key}" {message}.')
            elif attribute == 'format':
                messages.append(f'"{stringify(error.get("actual"))}" {message}.')
            else:
                messages.append(message)

        return messages

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'errors': self.errors,
            'message': self.message,
            'statusCode': self.status_code,
        }


def validate(data: Any, schema: Dict[str, Any]) -> ValidationError:
    """
    Validate data against a model schema and return a ValidationError
    describing the outcome. `valid` is True when nothing failed.
    """
    validator = Draft7Validator(constraints(schema), format_checker=format_checker)

    errors = {}
    for error in validator.iter_errors(data):
        described = _describe(error)
        errors.setdefault(described['property'], described)

    validation = ValidationError(len(errors) == 0, errors)

    if not validation.valid:
        logger.debug('Validation failed: %s', validation.message)

    return validation


__all__ = [
    'ValidationError',
    'constraints',
    'format_checker',
    'validate',
]
