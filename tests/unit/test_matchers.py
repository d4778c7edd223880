"""Tests for invocation-count matchers."""

import pytest

from stubkit.errors import UnexpectedInvocationError, VerificationError
from stubkit.matchers import AnyCount, AtLeastOnce, Exactly, Never
from stubkit.types import VerificationFailure


def test_never_fails_on_first_call() -> None:
    """Never raises on the call that makes the count 1."""
    matcher = Never()

    with pytest.raises(UnexpectedInvocationError, match="save: expected no calls, got call #1"):
        matcher.invoked("save")

    assert matcher.observed_count == 1


def test_never_passes_verification() -> None:
    """Never has no floor; its ceiling is enforced at call time."""
    matcher = Never()

    matcher.verify("save")

    assert matcher.failure("save") is None


def test_exactly_allows_up_to_count_then_fails_fast() -> None:
    """Exactly(3) accepts three calls and raises on the fourth."""
    matcher = Exactly(3)
    for _ in range(3):
        matcher.invoked("save")

    with pytest.raises(UnexpectedInvocationError) as exc_info:
        matcher.invoked("save")

    assert exc_info.value.member == "save"
    assert exc_info.value.expected == "exactly 3 calls"
    assert exc_info.value.observed == 4


def test_exactly_fails_verification_when_called_too_few_times() -> None:
    """Exactly(3) with two calls fails verification, not the calls themselves."""
    matcher = Exactly(3)
    matcher.invoked("save")
    matcher.invoked("save")

    with pytest.raises(VerificationError) as exc_info:
        matcher.verify("save", "app.User")

    assert exc_info.value.failures == (
        VerificationFailure(
            double_type="app.User", member="save", expected="exactly 3 calls", observed=2
        ),
    )


def test_exactly_passes_verification_at_count() -> None:
    matcher = Exactly(1)
    matcher.invoked("save")

    matcher.verify("save")


def test_exactly_zero_behaves_like_never() -> None:
    matcher = Exactly(0)

    matcher.verify("save")
    with pytest.raises(UnexpectedInvocationError):
        matcher.invoked("save")


def test_exactly_rejects_negative_count() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        Exactly(-1)


def test_at_least_once_fails_verification_without_calls() -> None:
    matcher = AtLeastOnce()

    failure = matcher.failure("get_name", "app.User")

    assert failure is not None
    assert failure.describe() == "app.User.get_name: expected at least 1 call, observed 0 calls"
    with pytest.raises(VerificationError):
        matcher.verify("get_name")


def test_at_least_once_has_no_ceiling() -> None:
    """AtLeastOnce never fails fast, however many calls are made."""
    matcher = AtLeastOnce()
    for _ in range(50):
        matcher.invoked("get_name")

    matcher.verify("get_name")
    assert matcher.observed_count == 50


def test_any_count_never_fails() -> None:
    matcher = AnyCount()
    matcher.verify("get_name")
    for _ in range(5):
        matcher.invoked("get_name")

    matcher.verify("get_name")


def test_fresh_returns_same_kind_with_zero_count() -> None:
    """fresh() copies the expectation but not the observed calls."""
    original = Exactly(2)
    original.invoked("save")

    copy = original.fresh()

    assert isinstance(copy, Exactly)
    assert copy.count == 2
    assert copy.observed_count == 0
    assert original.observed_count == 1


def test_invocation_errors_are_assertion_errors() -> None:
    """Test runners report count violations as failures."""
    matcher = Never()

    with pytest.raises(AssertionError):
        matcher.invoked("save")
    with pytest.raises(AssertionError):
        AtLeastOnce().verify("save")
