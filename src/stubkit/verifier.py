"""End-of-test verification of invocation expectations."""

from stubkit.errors import VerificationError
from stubkit.state import double_state
from stubkit.types import VerificationFailure


def collect_failures(double: object) -> list[VerificationFailure]:
    """Return every unmet expectation on double, in binding order.

    Raises:
        NotAStubError: If double is not a double
    """
    state = double_state(double, "verify")
    failures: list[VerificationFailure] = []
    for member, matcher in state.matchers():
        failure = matcher.failure(member, state.type_name)
        if failure is not None:
            failures.append(failure)
    return failures


def verify_doubles(*doubles: object) -> None:
    """Check the expectations of all given doubles.

    Raises:
        VerificationError: Listing every unmet expectation across all doubles
    """
    failures: list[VerificationFailure] = []
    for double in doubles:
        failures.extend(collect_failures(double))
    if failures:
        raise VerificationError(failures)


class StubRegistry:
    """Doubles created for one test, verified together when it ends.

    Pass it as ``registry=`` to the create_* functions, or use the
    ``stub_registry`` pytest fixture which verifies at teardown.
    """

    def __init__(self) -> None:
        self._doubles: list[object] = []

    def register(self, double: object) -> None:
        double_state(double, "register")
        if any(existing is double for existing in self._doubles):
            return
        self._doubles.append(double)

    @property
    def doubles(self) -> list[object]:
        return list(self._doubles)

    def verify(self) -> None:
        """Raise VerificationError if any registered double has unmet expectations."""
        verify_doubles(*self._doubles)

    def clear(self) -> None:
        self._doubles.clear()
