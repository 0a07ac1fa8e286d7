# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Default value generators, for use as a descriptor `default`:
#
#   {'_id': {'type': 'string', 'default': uuid}}
#   {'token': {'type': 'string', 'default': random(16)}}
#   {'created': {'type': 'number', 'default': timestamp}}


from typing import Callable
import secrets
import time
import uuid as _uuid


def uuid() -> str:
    "Random (version 4) UUID string."
    return str(_uuid.uuid4())


def random(length: int = 10) -> Callable[[], str]:
    "Generator of random hex strings built from `length` random bytes."
    def generate() -> str:
        return secrets.token_hex(length or 10)
    return generate


def timestamp() -> int:
    "Milliseconds since the epoch."
    return int(time.time() * 1000)


__all__ = [
    'random',
    'timestamp',
    'uuid',
]
