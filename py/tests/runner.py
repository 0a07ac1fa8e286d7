# Test runner for the JSON case sets in cases.json.

import os
import json
import re
import traceback
from typing import Any, Dict, Callable, TypedDict

from modinha.struct import (
    UNDEF,
    clone,
    stringify,
)


NULLMARK = '__NULL__'  # Value is JSON null
UNDEFMARK = '__UNDEF__'  # Value is not present (thus, undefined)


class RunPack(TypedDict):
    spec: Dict[str, Any]
    runset: Callable
    runsetflags: Callable


def makeRunner(testfile: str):

    def runner(name: str) -> RunPack:
        spec = resolve_spec(name, testfile)

        def runsetflags(testspec, flags, subject):
            flags = resolve_flags(flags)
            testspecmap = fixJSON(testspec, flags)
            testset = testspecmap['set']

            for entry in testset:
                try:
                    entry = resolve_entry(entry, flags)
                    args = resolve_args(entry)

                    res = subject(*args)
                    res = fixJSON(res, flags)
                    entry['res'] = res
                    check_result(entry, res)

                except Exception as err:
                    handle_error(entry, err)

        def runset(testspec, subject):
            return runsetflags(testspec, {}, subject)

        return {
            "spec": spec,
            "runset": runset,
            "runsetflags": runsetflags,
        }

    return runner


def resolve_spec(name: str, testfile: str) -> Dict[str, Any]:
    with open(os.path.join(os.path.dirname(__file__), testfile), 'r', encoding='utf-8') as f:
        alltests = json.load(f)

    if name in alltests:
        return alltests[name]
    return alltests


def check_result(entry, res):
    out = entry.get('out')

    if out == res:
        return

    try:
        cleaned_res = json.loads(json.dumps(res, default=str))
    except (TypeError, ValueError):
        cleaned_res = res

    if cleaned_res != out:
        raise AssertionError(
            f"Expected: {out}, got: {cleaned_res}\n"
            f"Entry: {json.dumps(entry, indent=2, default=jsonfallback)}"
        )


def handle_error(entry, err):
    entry['thrown'] = err
    entry_err = entry.get('err')

    # The test expects an error
    if entry_err is not None:
        if entry_err is True or matchval(entry_err, str(err)):
            return True

        raise AssertionError(
            f"ERROR MATCH: [{stringify(entry_err)}] <=> [{str(err)}]"
        )

    elif isinstance(err, AssertionError):
        raise AssertionError(
            f"{str(err)}\n\nENTRY: {json.dumps(entry, indent=2, default=jsonfallback)}"
        )

    else:
        raise AssertionError(
            f"{traceback.format_exc()}\nENTRY: " +
            f"{json.dumps(entry, indent=2, default=jsonfallback)}"
        )


def resolve_args(entry):
    args = []

    if 'args' in entry:
        args = clone(entry['args'])
    elif 'in' in entry:
        args = [clone(entry['in'])]

    return args


def resolve_flags(flags: Dict[str, Any] = None) -> Dict[str, bool]:
    if flags is None:
        flags = {}

    flags["null"] = flags.get("null", True)

    return flags


def resolve_entry(entry: Dict[str, Any], flags: Dict[str, bool]) -> Dict[str, Any]:

    # Set default output value for missing 'out' field
    if 'out' not in entry and flags.get("null", True):
        entry["out"] = NULLMARK

    return entry


def fixJSON(obj, flags):
    if obj is None:
        return NULLMARK if flags.get("null", True) else None

    if obj is UNDEF:
        return UNDEFMARK

    if isinstance(obj, Exception):
        return {
            **vars(obj),
            'name': type(obj).__name__,
            'message': str(obj)
        }

    elif isinstance(obj, list):
        return [fixJSON(item, flags) for item in obj]
    elif isinstance(obj, dict):
        return {k: fixJSON(v, flags) for k, v in obj.items()}

    return obj


def jsonfallback(obj):
    return f"<non-serializable: {type(obj).__name__}>"


def matchval(check, base):
    if check == UNDEFMARK or check == NULLMARK:
        check = None

    if check == base:
        return True

    if isinstance(check, str):
        base_str = stringify(base)

        # Regex pattern with /pattern/ syntax
        regex_match = re.match(r'^/(.+)/$', check)

        if regex_match:
            return re.search(regex_match.group(1), base_str) is not None
        else:
            return check.lower() in base_str.lower()

    return False


__all__ = [
    'NULLMARK',
    'UNDEFMARK',
    'makeRunner',
]
