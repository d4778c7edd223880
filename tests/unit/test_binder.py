"""Tests for binding behaviors and expectations to doubles."""

import functools

import pytest

from stubkit import (
    NotAStubError,
    SequenceExhaustedError,
    UnexpectedInvocationError,
    VerificationError,
    at_least_once,
    consecutive,
    create_double,
    exactly,
    never,
    once,
    verify_doubles,
)
from stubkit.behaviors import Callback, Consecutive, Expectation, Value, is_callback
from stubkit.binder import behavior_for, bind, bind_fields
from stubkit.matchers import AnyCount, Exactly
from stubkit.reflection import describe_type
from tests.test_utils.sample_types import Both, User


class Greeter:
    def __call__(self, other: str) -> str:
        return f"hey {other}"


def test_callback_receives_call_arguments() -> None:
    user = create_double(User, {"greet": lambda other: f"hi {other}"})

    assert user.greet("bob") == "hi bob"
    assert user.greet(other="amy") == "hi amy"


def test_partial_is_a_callback() -> None:
    user = create_double(User, {"greet": functools.partial("{}-{}".format, "hi")})

    assert user.greet("bob") == "hi-bob"


def test_classes_and_callable_instances_are_values() -> None:
    greeter = Greeter()
    user = create_double(User, {"get_name": str, "greet": greeter})

    assert user.get_name() is str
    assert user.greet("bob") is greeter


def test_is_callback() -> None:
    assert is_callback(lambda: None)
    assert is_callback(len)
    assert is_callback(User("john").get_name)
    assert not is_callback(User)
    assert not is_callback(Greeter())
    assert not is_callback("davert")


def test_consecutive_values_in_order() -> None:
    user = create_double(User, {"get_name": consecutive("david", "emma", "sam", "amy")})

    names = [user.get_name() for _ in range(4)]

    assert names == ["david", "emma", "sam", "amy"]
    with pytest.raises(SequenceExhaustedError):
        user.get_name()


def test_sequencer_shared_by_two_doubles_keeps_separate_cursors() -> None:
    names = consecutive("david", "emma")
    first = create_double(User, {"get_name": names})
    second = create_double(User, {"get_name": names})

    assert first.get_name() == "david"
    assert second.get_name() == "david"
    assert first.get_name() == "emma"


def test_never_raises_on_first_call() -> None:
    user = create_double(User, {"save": never()})

    with pytest.raises(UnexpectedInvocationError):
        user.save()


def test_exactly_three_calls() -> None:
    user = create_double(User, {"save": exactly(3, True)})
    for _ in range(3):
        assert user.save() is True
    verify_doubles(user)

    with pytest.raises(UnexpectedInvocationError, match="got call #4"):
        user.save()


def test_exactly_three_calls_with_two_fails_verification() -> None:
    user = create_double(User, {"save": exactly(3)})
    user.save()
    user.save()

    with pytest.raises(VerificationError, match="expected exactly 3 calls, observed 2 calls"):
        verify_doubles(user)


def test_once_with_value_source() -> None:
    user = create_double(User, {"get_name": once("davert")})

    assert user.get_name() == "davert"
    verify_doubles(user)


def test_once_without_source_returns_none() -> None:
    user = create_double(User, {"save": once()})

    assert user.save() is None


def test_at_least_once_with_callback() -> None:
    user = create_double(User, {"greet": at_least_once(lambda other: other.upper())})

    with pytest.raises(VerificationError):
        verify_doubles(user)
    assert user.greet("bob") == "BOB"
    assert user.greet("amy") == "AMY"
    verify_doubles(user)


def test_expectation_with_consecutive_source() -> None:
    user = create_double(User, {"get_name": exactly(2, consecutive("a", "b"))})

    assert [user.get_name(), user.get_name()] == ["a", "b"]
    verify_doubles(user)


def test_ceiling_violation_happens_before_callback_runs() -> None:
    calls: list[str] = []
    user = create_double(User, {"greet": once(calls.append)})
    user.greet("first")

    with pytest.raises(UnexpectedInvocationError):
        user.greet("second")

    assert calls == ["first"]


def test_one_expectation_bound_to_two_members_counts_separately() -> None:
    expectation = once()
    user = create_double(User, {"save": expectation, "get_name": expectation})

    user.save()
    user.get_name()

    verify_doubles(user)


def test_operation_wins_over_declared_field() -> None:
    """A name that is both annotated and defined as a method is bound as an operation."""
    assert "save" in describe_type(Both).operations
    assert "save" not in describe_type(Both).fields
    both = create_double(Both, {"save": once("stub")})

    assert both.save() == "stub"
    verify_doubles(both)
    with pytest.raises(UnexpectedInvocationError):
        both.save()


def test_static_method_expectation() -> None:
    user = create_double(User, {"normalize": once("x")})

    assert user.normalize("A") == "x"
    verify_doubles(user)


def test_behavior_for_wraps_every_binding_in_an_expectation() -> None:
    plain = behavior_for("davert")
    assert isinstance(plain, Expectation)
    assert isinstance(plain.matcher, AnyCount)
    assert plain.inner == Value("davert")
    assert isinstance(behavior_for(len).inner, Callback)
    assert isinstance(behavior_for(consecutive(1)).inner, Consecutive)

    counted = behavior_for(exactly(2, "v"))
    assert isinstance(counted.matcher, Exactly)
    assert counted.inner == Value("v")


def test_bind_rejects_plain_object() -> None:
    with pytest.raises(NotAStubError, match="only stubbed objects"):
        bind(User("john"), {"get_name": "davert"})


def test_bind_fields_sets_fields_on_plain_object() -> None:
    user = User("john")

    bind_fields(user, {"name": "emma", "nickname": "em"})

    assert user.get_name() == "emma"
    assert user.nickname == "em"


def test_bind_fields_rejects_operation_names() -> None:
    with pytest.raises(NotAStubError, match="get_name"):
        bind_fields(User("john"), {"get_name": "davert"})
