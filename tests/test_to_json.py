"""Tests for to_json() hook handling through convert()."""

import datetime
import types

from pydantic import BaseModel

from safe_json_value import convert, ChangeEntry, ChangeReason, UNDEFINED


class ReturnsTrue:
    def to_json(self):
        return True


class ReturnsUndefined:
    def to_json(self):
        return UNDEFINED


class ReturnsNone:
    def to_json(self):
        return None


class Raises:
    def to_json(self):
        raise ValueError("test")


def test_calls_to_json():
    """A callable to_json() replaces the value and is recorded once."""
    input = ReturnsTrue()
    result = convert(input)

    assert result.value is True
    assert result.changes == [
        ChangeEntry(path=(), old_value=input, new_value=True, reason=ChangeReason.TO_JSON),
    ]


def test_to_json_returning_undefined():
    """A hook returning UNDEFINED omits the property: toJSON then invalidType."""
    input = {"prop": ReturnsUndefined()}
    result = convert(input)

    assert result.value == {}
    assert result.changes == [
        ChangeEntry(
            path=("prop",),
            old_value=input["prop"],
            new_value=UNDEFINED,
            reason=ChangeReason.TO_JSON,
        ),
        ChangeEntry(
            path=("prop",),
            old_value=UNDEFINED,
            new_value=UNDEFINED,
            reason=ChangeReason.INVALID_TYPE,
        ),
    ]


def test_to_json_returning_none_is_null():
    """None is JSON null, so a hook returning None keeps the property."""
    input = {"prop": ReturnsNone()}
    result = convert(input)

    assert result.value == {"prop": None}
    assert [entry.reason for entry in result.changes] == [ChangeReason.TO_JSON]


def test_to_json_that_raises():
    """A raising hook yields unsafeToJSON (with error) then invalidType."""
    input = Raises()
    result = convert(input)

    assert result.value is UNDEFINED
    assert len(result.changes) == 2

    unsafe, invalid = result.changes
    assert unsafe.path == ()
    assert unsafe.old_value is input
    assert unsafe.new_value is UNDEFINED
    assert unsafe.reason == ChangeReason.UNSAFE_TO_JSON
    assert unsafe.error is not None
    assert unsafe.error.name == "ValueError"
    assert unsafe.error.message == "test"

    assert invalid == ChangeEntry(
        path=(),
        old_value=UNDEFINED,
        new_value=UNDEFINED,
        reason=ChangeReason.INVALID_TYPE,
    )


def test_to_json_that_is_not_callable():
    """A to_json attribute that is not callable is ordinary data."""
    input = types.SimpleNamespace(to_json=True)
    result = convert(input)

    assert result.value == {"to_json": True}
    assert result.changes == []


def test_mapping_key_named_to_json_is_not_a_hook():
    """Hooks are attributes: a mapping item called to_json is plain data."""
    calls = []
    result = convert({"to_json": True, "other": 1})
    assert result.value == {"to_json": True, "other": 1}
    assert result.changes == []

    result = convert({"to_json": lambda: calls.append(1)})
    assert calls == []
    assert result.value == {}
    assert [entry.reason for entry in result.changes] == [ChangeReason.INVALID_TYPE]


def test_no_changes_without_hook():
    """Values without a hook produce no toJSON/unsafeToJSON entries."""
    result = convert({"a": [1, "two", None], "b": {"c": False}})

    assert result.value == {"a": [1, "two", None], "b": {"c": False}}
    assert result.changes == []


def test_dates():
    """datetime values use isoformat() as their hook."""
    input = datetime.datetime(2024, 1, 2, 3, 4, 5)
    result = convert(input)

    assert result.value == "2024-01-02T03:04:05"
    assert result.changes == [
        ChangeEntry(
            path=(),
            old_value=input,
            new_value="2024-01-02T03:04:05",
            reason=ChangeReason.TO_JSON,
        ),
    ]


def test_date_and_time():
    result = convert({"day": datetime.date(2024, 5, 6), "at": datetime.time(7, 8)})

    assert result.value == {"day": "2024-05-06", "at": "07:08:00"}
    assert [entry.path for entry in result.changes] == [("day",), ("at",)]


def test_does_not_call_to_json_recursively():
    """The hook found on a hook result is never called in the same step."""
    nested_calls = []
    new_value = types.SimpleNamespace(to_json=lambda: nested_calls.append(1), prop=True)

    class Outer:
        def to_json(self):
            return new_value

    input = Outer()
    result = convert(input)

    assert result.value == {"prop": True}
    assert nested_calls == []
    assert result.changes == [
        ChangeEntry(path=(), old_value=input, new_value=new_value, reason=ChangeReason.TO_JSON),
        ChangeEntry(
            path=("to_json",),
            old_value=new_value.to_json,
            new_value=UNDEFINED,
            reason=ChangeReason.INVALID_TYPE,
        ),
    ]


def test_hooks_on_children_of_hook_result_run():
    """Children of a hook result are visited as new values, so their hooks run."""

    class Outer:
        def to_json(self):
            return {"child": ReturnsTrue()}

    result = convert(Outer())

    assert result.value == {"child": True}
    assert [(entry.path, entry.reason) for entry in result.changes] == [
        ((), ChangeReason.TO_JSON),
        (("child",), ChangeReason.TO_JSON),
    ]


def test_hook_called_once_per_visit():
    calls = []

    class Counted:
        def to_json(self):
            calls.append(1)
            return {"a": 1}

    convert(Counted())
    assert len(calls) == 1

    shared = Counted()
    convert([shared, shared])
    assert len(calls) == 3


def test_hook_returning_self():
    """A hook returning its own owner is flattened, not called again."""
    calls = []

    class Identity:
        def __init__(self):
            self.a = 1

        def to_json(self):
            calls.append(1)
            return self

    input = Identity()
    result = convert(input)

    assert calls == [1]
    assert result.value == {"a": 1}
    assert [entry.reason for entry in result.changes] == [
        ChangeReason.TO_JSON,
        ChangeReason.UNRESOLVED_CLASS,
    ]


class SelfConverting:
    def __init__(self):
        self.one = True
        self.two = UNDEFINED

    def to_json(self):
        return convert(self).value


def test_to_json_calling_convert_itself():
    """A hook may convert its own owner: the nested call sees no hook."""
    input = SelfConverting()
    value = input.to_json()

    assert value == {"one": True}
    assert "two" not in value
    assert "to_json" not in value


def test_reentrant_convert_uses_its_own_change_log():
    input = SelfConverting()
    result = convert(input)

    assert result.value == {"one": True}
    # unresolvedClass/invalidType belong to the nested conversion only
    assert result.changes == [
        ChangeEntry(path=(), old_value=input, new_value={"one": True}, reason=ChangeReason.TO_JSON),
    ]

    # The hook is available again once the previous call returned
    assert convert(input).changes[0].reason == ChangeReason.TO_JSON


def test_pydantic_models_are_dumped():
    class Point(BaseModel):
        x: int
        y: int
        seen_at: datetime.date

    input = Point(x=1, y=2, seen_at=datetime.date(2024, 1, 1))
    result = convert(input)

    assert result.value == {"x": 1, "y": 2, "seen_at": "2024-01-01"}
    assert [(entry.path, entry.reason) for entry in result.changes] == [
        ((), ChangeReason.TO_JSON),
        (("seen_at",), ChangeReason.TO_JSON),
    ]


def test_exceptions_are_normalized():
    result = convert({"error": KeyError("missing")})

    error = result.value["error"]
    assert error["name"] == "KeyError"
    assert error["message"] == "'missing'"
    assert isinstance(error["stack"], str)
    assert error["cause"] is None
    assert result.changes[0].reason == ChangeReason.TO_JSON


def test_explicit_to_json_wins_over_builtin_hook():
    class Stamp(datetime.date):
        def to_json(self):
            return "custom"

    assert convert(Stamp(2024, 1, 1)).value == "custom"


def test_to_json_lookup_that_raises():
    """A to_json lookup that raises means no hook, without any entry for it."""

    class Trapped:
        def __init__(self):
            self.a = 1

        def __getattr__(self, name):
            raise RuntimeError(name)

    result = convert(Trapped())
    assert result.value == {"a": 1}
    assert [entry.reason for entry in result.changes] == [ChangeReason.UNRESOLVED_CLASS]
