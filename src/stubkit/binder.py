"""Attach behaviors and field values to doubles.

Each override name is classified against the double's original type:

1. an operation: the member is intercepted (lazily, if the creation policy
   left it alone) and a behavior replaces whatever was bound before
2. a declared field: the value is force-assigned
3. anything else: the value is attached as a new attribute

Operations win over fields when a name could be either.
"""

import logging

from stubkit.behaviors import (
    Behavior,
    Callback,
    Consecutive,
    Expectation,
    ExpectedInvocation,
    Value,
    is_callback,
)
from stubkit.errors import NotAStubError
from stubkit.matchers import AnyCount
from stubkit.reflection import describe_type, force_set_field, install_interceptor
from stubkit.sequencer import ConsecutiveSequencer
from stubkit.state import DoubleState, double_state
from stubkit.types import Overrides, iter_overrides

logger = logging.getLogger(__name__)


def bind(double: object, overrides: Overrides) -> None:
    """Apply overrides to a double, in the order given.

    May be called any number of times on the same double; later bindings of
    an operation replace earlier ones, including their matchers.

    Raises:
        NotAStubError: If double was not produced by the double factory
    """
    state = double_state(double, "update")
    descriptor = state.descriptor

    for name, value in iter_overrides(overrides):
        if name in descriptor.operations:
            _bind_operation(double, state, name, value)
        elif name in descriptor.fields:
            logger.debug("Forcing field %s on %s double", name, state.type_name)
            force_set_field(double, name, value)
        else:
            logger.debug("Attaching new attribute %s to %s double", name, state.type_name)
            force_set_field(double, name, value)


def bind_fields(instance: object, overrides: Overrides) -> None:
    """Force-assign field overrides on a plain (non-double) object.

    Raises:
        NotAStubError: If an override names an operation, which only a double
            can rebind
    """
    descriptor = describe_type(type(instance))
    for name, value in iter_overrides(overrides):
        if name in descriptor.operations:
            raise NotAStubError(
                f"Cannot rebind operation {name!r} on a plain {descriptor.name} object; "
                "create a double instead"
            )
        force_set_field(instance, name, value)


def behavior_for(value: object) -> Expectation:
    """Translate an override value into the behavior bound to an operation.

    Every operation binding is an Expectation; plain overrides use AnyCount so
    they flow through the same call path without a count constraint.
    """
    if isinstance(value, ExpectedInvocation):
        return Expectation(matcher=value.matcher.fresh(), inner=_inner_behavior(value.source))
    if is_callback(value):
        return Expectation(matcher=AnyCount(), inner=Callback(value))  # type: ignore[arg-type]
    if isinstance(value, ConsecutiveSequencer):
        return Expectation(matcher=AnyCount(), inner=Consecutive(value.restarted()))
    return Expectation(matcher=AnyCount(), inner=Value(value))


def _inner_behavior(source: object) -> Behavior:
    if source is None:
        return Callback(_no_op)
    if is_callback(source):
        return Callback(source)  # type: ignore[arg-type]
    if isinstance(source, ConsecutiveSequencer):
        return Consecutive(source.restarted())
    return Value(source)


def _no_op(*args: object, **kwargs: object) -> None:
    return None


def _bind_operation(double: object, state: DoubleState, name: str, value: object) -> None:
    if not state.is_intercepted(name):
        install_interceptor(type(double), state.descriptor, name, state.dispatch)
        state.mark_intercepted(name)
    behavior = behavior_for(value)
    state.set_behavior(name, behavior)
    logger.debug("Bound %s.%s to %r", state.type_name, name, behavior)
