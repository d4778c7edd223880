"""Behaviors bound to intercepted operations, and the expectation helpers.

A behavior decides what an intercepted call returns:

- Value: the same value on every call
- Callback: the result of calling a function with the call's arguments
- Consecutive: the next value of a ConsecutiveSequencer
- Expectation: advances an InvocationMatcher, then delegates to an inner behavior

The helpers never(), once(), at_least_once() and exactly() pair a matcher with
a behavior source; the binder turns that pairing into an Expectation.
"""

import functools
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from stubkit.matchers import AtLeastOnce, Exactly, InvocationMatcher, Never
from stubkit.sequencer import ConsecutiveSequencer


class Behavior(ABC):
    @abstractmethod
    def invoke(self, member: str, args: tuple[object, ...], kwargs: Mapping[str, object]) -> object:
        """Produce the result of one intercepted call to member."""
        ...


@dataclass(frozen=True)
class Value(Behavior):
    value: object

    def invoke(self, member: str, args: tuple[object, ...], kwargs: Mapping[str, object]) -> object:
        return self.value


@dataclass(frozen=True)
class Callback(Behavior):
    func: Callable[..., object]

    def invoke(self, member: str, args: tuple[object, ...], kwargs: Mapping[str, object]) -> object:
        return self.func(*args, **kwargs)


@dataclass(frozen=True)
class Consecutive(Behavior):
    sequencer: ConsecutiveSequencer

    def invoke(self, member: str, args: tuple[object, ...], kwargs: Mapping[str, object]) -> object:
        return self.sequencer.next_value(member)


@dataclass(frozen=True)
class Expectation(Behavior):
    """Counts the call against matcher before the inner behavior runs.

    A ceiling violation raises before the inner behavior has any effect.
    """

    matcher: InvocationMatcher
    inner: Behavior

    def invoke(self, member: str, args: tuple[object, ...], kwargs: Mapping[str, object]) -> object:
        self.matcher.invoked(member)
        return self.inner.invoke(member, args, kwargs)


def is_callback(value: object) -> bool:
    """Check whether an override value should be called rather than returned.

    Only functions, lambdas, bound methods, builtins and functools.partial
    objects count. Classes and instances with __call__ are returned as values.
    """
    return inspect.isroutine(value) or isinstance(value, functools.partial)


@dataclass(frozen=True)
class ExpectedInvocation:
    """An invocation-count matcher paired with what the call should do.

    Attributes:
        matcher: Template matcher; each binding receives its own fresh copy
        source: None for a no-op, a callback, a ConsecutiveSequencer, or a value
    """

    matcher: InvocationMatcher
    source: object = None


def never(source: object = None) -> ExpectedInvocation:
    """Expect the operation never to be called; the first call raises."""
    return ExpectedInvocation(matcher=Never(), source=source)


def once(source: object = None) -> ExpectedInvocation:
    """Expect exactly one call."""
    return ExpectedInvocation(matcher=Exactly(1), source=source)


def at_least_once(source: object = None) -> ExpectedInvocation:
    """Expect one or more calls, checked at verification."""
    return ExpectedInvocation(matcher=AtLeastOnce(), source=source)


def exactly(count: int, source: object = None) -> ExpectedInvocation:
    """Expect exactly count calls.

    Calls beyond count raise immediately; fewer calls fail verification.

    Raises:
        ValueError: If count is negative
    """
    return ExpectedInvocation(matcher=Exactly(count), source=source)
