"""Consecutive return values for an intercepted operation."""

from collections.abc import Sequence

from stubkit.errors import SequenceExhaustedError


class ConsecutiveSequencer:
    """Ordered values handed out one per call.

    Values are returned as they are, never invoked, even when callable. Calling
    past the last value raises SequenceExhaustedError so that over-calls show up
    in the test instead of silently returning a stale or empty value.
    """

    def __init__(self, values: Sequence[object]) -> None:
        self._values = tuple(values)
        self._cursor = 0

    @property
    def values(self) -> tuple[object, ...]:
        return self._values

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def remaining(self) -> int:
        return len(self._values) - self._cursor

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._values)

    def next_value(self, member: str) -> object:
        if self.exhausted:
            raise SequenceExhaustedError(member, len(self._values))
        value = self._values[self._cursor]
        self._cursor += 1
        return value

    def restarted(self) -> "ConsecutiveSequencer":
        """Return a sequencer over the same values with its own cursor at zero."""
        return ConsecutiveSequencer(self._values)

    def __repr__(self) -> str:
        return f"ConsecutiveSequencer({list(self._values)!r}, cursor={self._cursor})"


def consecutive(*values: object) -> ConsecutiveSequencer:
    """Return values in order, one per call.

    Example:
        >>> names = consecutive("david", "emma")
        >>> names.next_value("get_name"), names.next_value("get_name")
        ('david', 'emma')
    """
    return ConsecutiveSequencer(values)
