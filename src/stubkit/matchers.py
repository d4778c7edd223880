"""Invocation-count matchers.

Each matcher counts the calls made to the one operation it is bound to.
Ceilings (Never, Exactly) are enforced on the call that crosses them, so the
offending call site is in the traceback. Floors (Exactly, AtLeastOnce) can only
be judged once the test is over, so they are checked by verification.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Self

from stubkit.errors import UnexpectedInvocationError, VerificationError
from stubkit.types import VerificationFailure


class InvocationMatcher(ABC):
    """Call counter with an optional fail-fast ceiling and verification floor."""

    def __init__(self) -> None:
        self._observed = 0

    @property
    def observed_count(self) -> int:
        return self._observed

    @abstractmethod
    def describe(self) -> str:
        """Human-readable expected call count, e.g. "exactly 2 calls"."""
        ...

    @abstractmethod
    def fresh(self) -> Self:
        """Return a matcher of the same kind with a zero count."""
        ...

    def invoked(self, member: str) -> None:
        """Record one call to member, raising if a ceiling is now exceeded.

        Raises:
            UnexpectedInvocationError: If this call exceeds the ceiling
        """
        self._observed += 1
        if self._exceeds_ceiling():
            raise UnexpectedInvocationError(member, self.describe(), self._observed)

    def failure(self, member: str, double_type: str = "") -> VerificationFailure | None:
        """Return the unmet floor for member, or None if the count is acceptable."""
        if self._meets_floor():
            return None
        return VerificationFailure(
            double_type=double_type,
            member=member,
            expected=self.describe(),
            observed=self._observed,
        )

    def verify(self, member: str, double_type: str = "") -> None:
        """Raise VerificationError if the floor for member was not met."""
        failure = self.failure(member, double_type)
        if failure is not None:
            raise VerificationError([failure])

    def _exceeds_ceiling(self) -> bool:
        return False

    def _meets_floor(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(observed={self._observed})"


class Never(InvocationMatcher):
    """Expects zero calls; the first call fails immediately."""

    def describe(self) -> str:
        return "no calls"

    def fresh(self) -> Never:
        return Never()

    def _exceeds_ceiling(self) -> bool:
        return self._observed >= 1


class Exactly(InvocationMatcher):
    """Expects exactly n calls: fails fast above n, fails verification below."""

    def __init__(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"Expected call count must be non-negative, got {count}")
        super().__init__()
        self.count = count

    def describe(self) -> str:
        if self.count == 1:
            return "exactly 1 call"
        return f"exactly {self.count} calls"

    def fresh(self) -> Exactly:
        return Exactly(self.count)

    def _exceeds_ceiling(self) -> bool:
        return self._observed > self.count

    def _meets_floor(self) -> bool:
        return self._observed == self.count

    def __repr__(self) -> str:
        return f"Exactly({self.count}, observed={self._observed})"


class AtLeastOnce(InvocationMatcher):
    """Expects one or more calls; only checked at verification."""

    def describe(self) -> str:
        return "at least 1 call"

    def fresh(self) -> AtLeastOnce:
        return AtLeastOnce()

    def _meets_floor(self) -> bool:
        return self._observed >= 1


class AnyCount(InvocationMatcher):
    """No constraint; carries plain overrides through the same call path."""

    def describe(self) -> str:
        return "any number of calls"

    def fresh(self) -> AnyCount:
        return AnyCount()
