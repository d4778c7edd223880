"""Exceptions raised by the double engine.

Invocation-count failures subclass AssertionError so that test runners report
them as test failures rather than errors.
"""

from collections.abc import Iterable

from stubkit.types import VerificationFailure


class StubError(Exception):
    """Base exception for stubkit errors."""


class UnknownTypeError(StubError):
    """Raised when a type reference does not resolve to an existing class."""


class ConstructionError(StubError):
    """Raised when a requested real constructor raised.

    The constructor's own exception is chained as ``__cause__``.
    """


class NotAStubError(StubError):
    """Raised when an operation that needs a double receives a plain object."""


class UnexpectedInvocationError(StubError, AssertionError):
    """Raised at the call site when an invocation ceiling is exceeded."""

    def __init__(self, member: str, expected: str, observed: int) -> None:
        self.member = member
        self.expected = expected
        self.observed = observed
        super().__init__(f"{member}: expected {expected}, got call #{observed}")


class SequenceExhaustedError(UnexpectedInvocationError):
    """Raised when a consecutive-values behavior is called past its last value."""

    def __init__(self, member: str, configured: int) -> None:
        self.configured = configured
        super().__init__(
            member, f"at most {configured} call(s), one per consecutive value", configured + 1
        )


class VerificationError(StubError, AssertionError):
    """Raised by explicit verification when invocation floors were not met.

    Aggregates every unmet expectation instead of stopping at the first.
    """

    def __init__(self, failures: Iterable[VerificationFailure]) -> None:
        self.failures = tuple(failures)
        lines = [f"{len(self.failures)} unmet invocation expectation(s):"]
        lines.extend(f"  - {failure.describe()}" for failure in self.failures)
        super().__init__("\n".join(lines))
