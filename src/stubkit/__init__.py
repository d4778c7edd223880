"""Test doubles built from real classes.

stubkit creates substitute objects that are real instances of a generated
subclass of the class under test. Selected operations are intercepted and
answer with bound values, callbacks, or consecutive values, optionally gated
by invocation-count expectations:

    user = create_double(User, {"get_name": "davert", "save": once()})
    ...
    verify_doubles(user)
"""

from stubkit.behaviors import ExpectedInvocation, at_least_once, exactly, never, once
from stubkit.errors import (
    ConstructionError,
    NotAStubError,
    SequenceExhaustedError,
    StubError,
    UnexpectedInvocationError,
    UnknownTypeError,
    VerificationError,
)
from stubkit.factory import (
    build_double,
    copy_instance,
    create_double,
    create_double_running_constructor,
    create_doubles,
    create_empty_double,
    create_empty_double_except,
    create_empty_double_running_constructor,
    create_empty_double_running_constructor_except,
    update_double,
)
from stubkit.sequencer import ConsecutiveSequencer, consecutive
from stubkit.state import is_double
from stubkit.types import InterceptionMode, InterceptionPolicy, StubSpec, VerificationFailure
from stubkit.verifier import StubRegistry, verify_doubles

__all__ = [
    "ConsecutiveSequencer",
    "ConstructionError",
    "ExpectedInvocation",
    "InterceptionMode",
    "InterceptionPolicy",
    "NotAStubError",
    "SequenceExhaustedError",
    "StubError",
    "StubRegistry",
    "StubSpec",
    "UnexpectedInvocationError",
    "UnknownTypeError",
    "VerificationError",
    "VerificationFailure",
    "at_least_once",
    "build_double",
    "consecutive",
    "copy_instance",
    "create_double",
    "create_double_running_constructor",
    "create_doubles",
    "create_empty_double",
    "create_empty_double_except",
    "create_empty_double_running_constructor",
    "create_empty_double_running_constructor_except",
    "exactly",
    "is_double",
    "never",
    "once",
    "update_double",
    "verify_doubles",
]
