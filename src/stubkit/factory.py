"""Create, update and copy doubles.

build_double() is the one construction path. The create_* functions choose
whether the real constructor runs and which operations are intercepted up
front:

    create_double                                   no constructor, overridden ops
    create_double_running_constructor               constructor,    overridden ops
    create_empty_double                             no constructor, all ops
    create_empty_double_except                      no constructor, all ops but one
    create_empty_double_running_constructor         constructor,    all ops
    create_empty_double_running_constructor_except  constructor,    all ops but one

An intercepted operation with no bound behavior returns None. Operations that
are not intercepted run their original code.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from stubkit.binder import bind, bind_fields
from stubkit.reflection import TypeDescriptor, describe_type, instantiate_proxy, resolve_type
from stubkit.state import DoubleState, double_state, is_double
from stubkit.types import (
    InterceptionMode,
    InterceptionPolicy,
    Overrides,
    StubSpec,
    iter_overrides,
)

if TYPE_CHECKING:
    from stubkit.verifier import StubRegistry

logger = logging.getLogger(__name__)


def compute_interception_set(
    descriptor: TypeDescriptor,
    policy: InterceptionPolicy,
    override_names: Sequence[str],
) -> frozenset[str]:
    """Decide which operations a new double intercepts up front.

    Abstract members are always included so the double can be instantiated.
    """
    if policy.mode == InterceptionMode.NONE:
        names: frozenset[str] = frozenset()
    elif policy.mode == InterceptionMode.ALL:
        names = descriptor.blanket_operations
    elif policy.mode == InterceptionMode.ALL_EXCEPT:
        names = descriptor.blanket_operations - {policy.excluded}
    else:
        names = frozenset(name for name in override_names if name in descriptor.operations)

    if descriptor.is_abstract:
        names = names | descriptor.abstract_members
    return names


def build_double(spec: StubSpec, *, registry: StubRegistry | None = None) -> object:
    """Build a double from a full StubSpec.

    Raises:
        UnknownTypeError: If spec.type_ref does not resolve to a class
        ConstructionError: If the real constructor was requested and raised
    """
    target = resolve_type(spec.type_ref)
    descriptor = describe_type(target)

    # Overrides may be a one-shot iterator; read it once and reuse the pairs
    pairs = list(iter_overrides(spec.overrides))
    intercept = compute_interception_set(descriptor, spec.policy, [name for name, _ in pairs])
    logger.debug(
        "Creating %s double (%s, constructor %s), intercepting %d operation(s)",
        descriptor.name,
        spec.policy.describe(),
        "runs" if spec.runs_constructor else "skipped",
        len(intercept),
    )

    state = DoubleState(descriptor, intercept)
    double = instantiate_proxy(
        descriptor,
        intercept,
        state.dispatch,
        state.tags(),
        spec.constructor_args,
        spec.constructor_kwargs,
    )
    bind(double, pairs)

    if registry is not None:
        registry.register(double)
    return double


def create_double(
    type_ref: object, overrides: Overrides = None, *, registry: StubRegistry | None = None
) -> object:
    """Create a double without running the constructor.

    Only overridden operations are intercepted; everything else keeps its
    original code.

    Example:
        >>> user = create_double(User, {"get_name": "davert", "save": once()})
    """
    spec = StubSpec(type_ref=type_ref, overrides=overrides)
    return build_double(spec, registry=registry)


def create_doubles(
    type_ref: object,
    count: int,
    overrides: Overrides = None,
    *,
    registry: StubRegistry | None = None,
) -> list[object]:
    """Create count independent doubles with the same overrides.

    Each double gets its own matchers and sequencer cursors.
    """
    if count < 0:
        raise ValueError(f"Cannot create a negative number of doubles: {count}")
    pairs = list(iter_overrides(overrides))
    return [create_double(type_ref, pairs, registry=registry) for _ in range(count)]


def create_double_running_constructor(
    type_ref: object,
    constructor_args: Sequence[object] = (),
    overrides: Overrides = None,
    *,
    constructor_kwargs: Mapping[str, object] | None = None,
    registry: StubRegistry | None = None,
) -> object:
    """Create a double and run the real constructor with the given arguments.

    Only overridden operations are intercepted.

    Raises:
        ConstructionError: If the constructor raised
    """
    spec = StubSpec(
        type_ref=type_ref,
        overrides=overrides,
        constructor_args=tuple(constructor_args),
        constructor_kwargs=dict(constructor_kwargs or {}),
    )
    return build_double(spec, registry=registry)


def create_empty_double(
    type_ref: object, overrides: Overrides = None, *, registry: StubRegistry | None = None
) -> object:
    """Create a double whose every operation is intercepted.

    Operations without an override return None instead of running.
    """
    spec = StubSpec(type_ref=type_ref, overrides=overrides, policy=InterceptionPolicy.all())
    return build_double(spec, registry=registry)


def create_empty_double_except(
    type_ref: object,
    method: str,
    overrides: Overrides = None,
    *,
    registry: StubRegistry | None = None,
) -> object:
    """Create a double intercepting every operation except method.

    method keeps its original code, so it can be tested against intercepted
    collaborators on the same object.
    """
    spec = StubSpec(
        type_ref=type_ref,
        overrides=overrides,
        policy=InterceptionPolicy.all_except(method),
    )
    return build_double(spec, registry=registry)


def create_empty_double_running_constructor(
    type_ref: object,
    constructor_args: Sequence[object] = (),
    overrides: Overrides = None,
    *,
    constructor_kwargs: Mapping[str, object] | None = None,
    registry: StubRegistry | None = None,
) -> object:
    spec = StubSpec(
        type_ref=type_ref,
        overrides=overrides,
        constructor_args=tuple(constructor_args),
        constructor_kwargs=dict(constructor_kwargs or {}),
        policy=InterceptionPolicy.all(),
    )
    return build_double(spec, registry=registry)


def create_empty_double_running_constructor_except(
    type_ref: object,
    method: str,
    constructor_args: Sequence[object] = (),
    overrides: Overrides = None,
    *,
    constructor_kwargs: Mapping[str, object] | None = None,
    registry: StubRegistry | None = None,
) -> object:
    spec = StubSpec(
        type_ref=type_ref,
        overrides=overrides,
        constructor_args=tuple(constructor_args),
        constructor_kwargs=dict(constructor_kwargs or {}),
        policy=InterceptionPolicy.all_except(method),
    )
    return build_double(spec, registry=registry)


def update_double(double: object, overrides: Overrides) -> object:
    """Re-bind members of an existing double and return it.

    Raises:
        NotAStubError: If double was not produced by this module
    """
    double_state(double, "update")
    bind(double, overrides)
    return double


def copy_instance(instance: object, overrides: Overrides = None) -> object:
    """Shallow-copy a plain object and force-assign field overrides on the copy.

    The original object is left untouched.

    Raises:
        TypeError: If instance is a double (a copy would share its behaviors)
        NotAStubError: If an override names an operation
    """
    if is_double(instance):
        raise TypeError(
            "copy_instance() copies plain objects; use update_double() or create a new double"
        )
    duplicate = copy.copy(instance)
    bind_fields(duplicate, overrides)
    return duplicate
