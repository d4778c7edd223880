"""Value types shared across the double engine."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto

# Overrides may be given as a mapping or as ordered (name, value) pairs.
# Pairs allow the same name twice; the later entry wins.
Overrides = Mapping[str, object] | Iterable[tuple[str, object]] | None


def iter_overrides(overrides: Overrides) -> Iterator[tuple[str, object]]:
    """Yield (name, value) pairs in the order the caller gave them."""
    if overrides is None:
        return
    if isinstance(overrides, Mapping):
        yield from overrides.items()
        return
    for name, value in overrides:
        yield name, value


class InterceptionMode(Enum):
    """Which operations of the target type are redirected to the engine."""

    NONE = auto()
    ALL = auto()
    ALL_EXCEPT = auto()
    ONLY_OVERRIDDEN = auto()


@dataclass(frozen=True)
class InterceptionPolicy:
    """Interception mode plus the excluded operation for ALL_EXCEPT.

    Attributes:
        mode: Interception mode
        excluded: Operation that keeps its original logic (ALL_EXCEPT only)
    """

    mode: InterceptionMode
    excluded: str | None = None

    def __post_init__(self) -> None:
        if self.mode == InterceptionMode.ALL_EXCEPT and self.excluded is None:
            raise ValueError("ALL_EXCEPT interception requires an excluded operation")
        if self.mode != InterceptionMode.ALL_EXCEPT and self.excluded is not None:
            raise ValueError(f"{self.mode.name} interception does not take an excluded operation")

    @staticmethod
    def none() -> InterceptionPolicy:
        return InterceptionPolicy(mode=InterceptionMode.NONE)

    @staticmethod
    def all() -> InterceptionPolicy:
        return InterceptionPolicy(mode=InterceptionMode.ALL)

    @staticmethod
    def all_except(name: str) -> InterceptionPolicy:
        return InterceptionPolicy(mode=InterceptionMode.ALL_EXCEPT, excluded=name)

    @staticmethod
    def only_overridden() -> InterceptionPolicy:
        return InterceptionPolicy(mode=InterceptionMode.ONLY_OVERRIDDEN)

    def describe(self) -> str:
        if self.mode == InterceptionMode.ALL_EXCEPT:
            return f"all-except {self.excluded}"
        return self.mode.name.lower().replace("_", "-")


@dataclass(frozen=True)
class StubSpec:
    """Everything needed to build one double.

    Attributes:
        type_ref: Class, import path, zero-argument factory, or instance
        overrides: Member overrides applied after construction
        constructor_args: Positional constructor arguments. None means the
            constructor is not run at all; an empty tuple runs it bare.
        constructor_kwargs: Keyword constructor arguments (ignored when
            constructor_args is None)
        policy: Which operations are intercepted up front
    """

    type_ref: object
    overrides: Overrides = None
    constructor_args: tuple[object, ...] | None = None
    constructor_kwargs: Mapping[str, object] = field(default_factory=dict)
    policy: InterceptionPolicy = field(default_factory=InterceptionPolicy.only_overridden)

    @property
    def runs_constructor(self) -> bool:
        return self.constructor_args is not None


@dataclass(frozen=True)
class VerificationFailure:
    """One unmet invocation expectation.

    Attributes:
        double_type: Qualified name of the type the double stands in for
        member: Operation name the expectation was bound to
        expected: Human-readable description of the expected call count
        observed: Number of calls actually observed
    """

    double_type: str
    member: str
    expected: str
    observed: int

    def describe(self) -> str:
        return (
            f"{self.double_type}.{self.member}: expected {self.expected}, "
            f"observed {_calls(self.observed)}"
        )


def _calls(count: int) -> str:
    if count == 1:
        return "1 call"
    return f"{count} calls"
