"""convert() must return for every input, however hostile."""

import json
import types

import pytest

from safe_json_value import convert, safe_dumps, ConversionResult


class RaisingEverything:
    def __init__(self):
        object.__setattr__(self, "a", 1)

    def __getattribute__(self, name):
        raise RuntimeError(name)

    def __getattr__(self, name):
        raise RuntimeError(name)


class RaisingHook:
    def to_json(self):
        raise SystemError("hook")


class RaisingHookProperty:
    @property
    def to_json(self):
        raise RuntimeError("lookup")


class DeepHook:
    """Each hook returns a fresh object with the same hook."""

    def __init__(self, level=0):
        self.level = level

    def to_json(self):
        return {"next": DeepHook(self.level + 1)}


class RecursiveHook:
    """Hook that recurses until the interpreter gives up."""

    def to_json(self):
        return self.to_json()


class ExplodingEquality:
    def __eq__(self, other):
        raise RuntimeError("eq")

    __hash__ = object.__hash__


class RaisingInstanceDict:
    """The class-level ``__dict__`` property raises."""

    @property
    def __dict__(self):
        raise RuntimeError("no instance dict")


# Factories, so that collection never touches a hostile instance
HOSTILE_VALUES = {
    "raising-everything": lambda: RaisingEverything(),
    "raising-hook": lambda: RaisingHook(),
    "raising-hook-property": lambda: RaisingHookProperty(),
    "deep-hook": lambda: DeepHook(),
    "recursive-hook": lambda: RecursiveHook(),
    "exploding-equality": lambda: ExplodingEquality(),
    "raising-instance-dict": lambda: RaisingInstanceDict(),
    "nested": lambda: {"nested": [RaisingEverything(), RaisingHook(), {1: 2}]},
    "namespace-hook": lambda: types.SimpleNamespace(to_json=RaisingHook().to_json),
    "invalid-types": lambda: [float("nan"), object(), type, len],
}


@pytest.mark.parametrize("make_value", list(HOSTILE_VALUES.values()), ids=list(HOSTILE_VALUES))
def test_convert_never_raises(make_value):
    value = make_value()
    result = convert(value)

    assert isinstance(result, ConversionResult)
    # Whatever survived is JSON
    json.loads(safe_dumps(value))


def test_raising_instance_dict_is_an_invalid_type():
    result = convert({"a": RaisingInstanceDict()})

    assert result.value == {}
    assert [(entry.path, entry.reason.value) for entry in result.changes] == [
        (("a",), "invalidType"),
    ]


def test_recursive_hook_is_contained():
    result = convert(RecursiveHook())
    assert result.changes[0].reason.value == "unsafeToJSON"
    assert result.changes[0].error.name == "RecursionError"


def test_deep_hook_chain_is_bounded():
    result = convert(DeepHook(), max_depth=5)
    assert result.change_summary["unsafeDepth"] == 1
    assert result.change_summary["toJSON"] == 6


def test_change_summary_counts_reasons():
    result = convert({"a": b"x", "b": b"y", "c": RaisingHook()})
    assert result.change_summary == {"invalidType": 3, "unsafeToJSON": 1}
