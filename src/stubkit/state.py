"""Per-double behavior table and the hidden tag that marks an object as a double."""

import inspect
from collections.abc import Iterable, Iterator, Mapping

from stubkit.behaviors import Behavior, Expectation
from stubkit.errors import NotAStubError
from stubkit.matchers import InvocationMatcher
from stubkit.reflection import TypeDescriptor

# Class attribute holding the qualified name of the type a double stands in for
MOCKED_TAG = "__stubkit_mocked__"
# Class attribute holding the double's DoubleState
STATE_ATTR = "__stubkit_state__"


class DoubleState:
    """Behaviors bound to one double, keyed by operation name.

    Every double owns exactly one DoubleState, and each bound behavior owns
    its matcher and sequencer; nothing here is shared between doubles.
    """

    def __init__(self, descriptor: TypeDescriptor, intercepted: Iterable[str]) -> None:
        self.descriptor = descriptor
        self._intercepted = set(intercepted)
        self._behaviors: dict[str, Behavior] = {}

    @property
    def type_name(self) -> str:
        return self.descriptor.name

    @property
    def intercepted(self) -> frozenset[str]:
        return frozenset(self._intercepted)

    def is_intercepted(self, name: str) -> bool:
        return name in self._intercepted

    def mark_intercepted(self, name: str) -> None:
        self._intercepted.add(name)

    def set_behavior(self, name: str, behavior: Behavior) -> None:
        """Bind behavior to name, discarding any behavior bound before."""
        self._behaviors.pop(name, None)
        self._behaviors[name] = behavior

    def behavior(self, name: str) -> Behavior | None:
        return self._behaviors.get(name)

    def dispatch(
        self, member: str, args: tuple[object, ...], kwargs: Mapping[str, object]
    ) -> object:
        """Handle one intercepted call; unbound members return None."""
        behavior = self._behaviors.get(member)
        if behavior is None:
            return None
        return behavior.invoke(member, args, kwargs)

    def matchers(self) -> Iterator[tuple[str, InvocationMatcher]]:
        """Yield (member, matcher) for every expectation, in binding order."""
        for name, behavior in self._behaviors.items():
            if isinstance(behavior, Expectation):
                yield name, behavior.matcher

    def tags(self) -> dict[str, object]:
        return {MOCKED_TAG: self.type_name, STATE_ATTR: self}


def is_double(obj: object) -> bool:
    """Check whether obj was produced by the double factory."""
    return isinstance(inspect.getattr_static(type(obj), STATE_ATTR, None), DoubleState)


def double_state(obj: object, action: str = "use") -> DoubleState:
    """Return the state of a double.

    Args:
        obj: Object expected to be a double
        action: Verb naming what the caller wanted to do, for the error message

    Raises:
        NotAStubError: If obj is not a double
    """
    state = inspect.getattr_static(type(obj), STATE_ATTR, None)
    if not isinstance(state, DoubleState):
        raise NotAStubError(
            f"You can {action} only stubbed objects; {type(obj).__qualname__} is not a double"
        )
    return state


def mocked_type_name(obj: object) -> str:
    """Return the qualified name of the type a double stands in for.

    Raises:
        NotAStubError: If obj is not a double
    """
    double_state(obj, "inspect")
    return str(inspect.getattr_static(type(obj), MOCKED_TAG))
