"""Reflective type capability used by the double factory.

Everything that touches Python's object model lives here:

- resolve_type: turn a class, import path, zero-argument factory or instance
  into a class
- describe_type: enumerate the operations, fields and abstract members of a class
- instantiate_proxy: build a private subclass whose listed members dispatch to
  engine-supplied logic, and allocate an instance of it with or without
  running the real constructor
- install_interceptor: redirect one more member of an existing proxy class
- force_set_field / force_get_field: field access that bypasses custom
  __setattr__/__getattribute__, frozen dataclasses and read-only properties
"""

import functools
import importlib
import inspect
import logging
import types
import typing
from abc import ABC
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass

from stubkit.errors import ConstructionError, UnknownTypeError

logger = logging.getLogger(__name__)

# (member, args, kwargs) -> result of the intercepted call
Dispatch = Callable[[str, tuple[object, ...], Mapping[str, object]], object]

# Attribute-access and lifecycle hooks. Replacing these would break the field
# overlay the binder relies on, so they are never operations.
RESERVED_MEMBERS = frozenset(
    {
        "__getattr__",
        "__getattribute__",
        "__setattr__",
        "__delattr__",
        "__new__",
        "__init__",
        "__init_subclass__",
        "__class_getitem__",
        "__subclasshook__",
    }
)

# Special methods whose None result Python rejects or misreads. Intercept-all
# policies leave them alone; overriding one by name still intercepts it.
PROTOCOL_HOOKS = frozenset(
    {
        "__repr__",
        "__str__",
        "__bytes__",
        "__format__",
        "__hash__",
        "__eq__",
        "__ne__",
        "__lt__",
        "__le__",
        "__gt__",
        "__ge__",
        "__bool__",
        "__len__",
        "__length_hint__",
        "__iter__",
        "__next__",
        "__reversed__",
        "__aiter__",
        "__anext__",
        "__await__",
        "__aenter__",
        "__aexit__",
        "__index__",
        "__int__",
        "__float__",
        "__complex__",
        "__fspath__",
        "__dir__",
        "__sizeof__",
        "__del__",
        "__copy__",
        "__deepcopy__",
        "__replace__",
        "__reduce__",
        "__reduce_ex__",
        "__getstate__",
        "__setstate__",
        "__getnewargs__",
        "__getnewargs_ex__",
        "__get__",
        "__set__",
        "__delete__",
        "__set_name__",
        "__mro_entries__",
        "__annotate__",
        "__annotate_func__",
    }
)

_PROXY_MARKER = "__stubkit_proxy__"

# Py_TPFLAGS_HEAPTYPE: set on classes created by a class statement
_HEAPTYPE = 1 << 9

# Bases that only contribute typing or ABC machinery
_SKIPPED_BASES = (object, ABC, typing.Generic, typing.Protocol)

# Bookkeeping attributes set by ABCMeta and typing.Protocol
_MACHINERY_ATTRS = frozenset({"_abc_impl", "_is_protocol", "_is_runtime_protocol"})

_OPERATION_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
    types.ClassMethodDescriptorType,
    staticmethod,
    classmethod,
    functools.partialmethod,
    functools.singledispatchmethod,
)


def is_special_name(name: str) -> bool:
    """Check for a __dunder__ name."""
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


@dataclass(frozen=True)
class TypeDescriptor:
    """Members of a class, as seen by the double factory.

    Attributes:
        target: The described class
        operations: Callable members (own and inherited, excluding object's
            and the reserved hooks)
        fields: Data members: annotations, __slots__, non-callable class
            attributes and properties
        properties: Subset of fields that are properties
        abstract_members: Abstract methods and properties still unimplemented
    """

    target: type
    operations: frozenset[str]
    fields: frozenset[str]
    properties: frozenset[str]
    abstract_members: frozenset[str]

    @property
    def name(self) -> str:
        return f"{self.target.__module__}.{self.target.__qualname__}"

    @property
    def is_abstract(self) -> bool:
        return len(self.abstract_members) > 0

    @property
    def blanket_operations(self) -> frozenset[str]:
        """Operations intercepted by an "intercept everything" policy.

        Excludes PROTOCOL_HOOKS, which are only intercepted when overridden
        by name. Other special methods such as __call__ or __getitem__ are
        intercepted like any operation.
        """
        return self.operations - PROTOCOL_HOOKS

    def raw_member(self, name: str) -> object:
        """Return the member as stored in the class dict, without binding."""
        return inspect.getattr_static(self.target, name, None)


def resolve_type(ref: object) -> type:
    """Resolve a type reference to a class.

    Args:
        ref: A class; an import path ("pkg.module:Outer.Inner" or
            "pkg.module.Name"); a function, bound method or functools.partial
            that takes no arguments and returns a class or import path; or an
            instance, whose runtime type is used.

    Raises:
        UnknownTypeError: If the reference does not name an existing class
    """
    if isinstance(ref, type):
        return ref
    if isinstance(ref, str):
        return _import_type(ref)
    if _is_type_factory(ref):
        produced = ref()
        logger.debug("Type factory %r produced %r", ref, produced)
        if not isinstance(produced, (type, str)):
            raise UnknownTypeError(
                f"Type factory {ref!r} returned {produced!r}, expected a class or import path"
            )
        return resolve_type(produced)
    return type(ref)


def _is_type_factory(ref: object) -> bool:
    return inspect.isfunction(ref) or inspect.ismethod(ref) or isinstance(ref, functools.partial)


def _import_type(path: str) -> type:
    module_name, sep, qualname = path.partition(":")
    if not sep:
        module_name, _, qualname = path.rpartition(".")
    if not module_name or not qualname:
        raise UnknownTypeError(
            f"Stubbed type {path!r} is not an import path like 'package.module:Class'"
        )

    try:
        target: object = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        # A missing dependency inside an existing module is not our error to rename
        if exc.name is None or not _is_module_prefix(exc.name, module_name):
            raise
        raise UnknownTypeError(
            f"Stubbed type {path!r} doesn't exist: no module {exc.name!r}"
        ) from exc

    for part in qualname.split("."):
        if not hasattr(target, part):
            raise UnknownTypeError(f"Stubbed type {path!r} doesn't exist")
        target = getattr(target, part)

    if not isinstance(target, type):
        raise UnknownTypeError(
            f"Stubbed type {path!r} resolves to {target!r}, which is not a class"
        )
    logger.debug("Resolved %s to %r", path, target)
    return target


def _is_module_prefix(candidate: str, module_name: str) -> bool:
    return module_name == candidate or module_name.startswith(candidate + ".")


def describe_type(target: type) -> TypeDescriptor:
    """Enumerate the members of target across its MRO (object excluded)."""
    members: dict[str, object] = {}
    declared: set[str] = set()
    # Walk from the base down so subclasses shadow what they redefine
    for klass in reversed(target.__mro__):
        if klass in _SKIPPED_BASES:
            continue
        declared.update(inspect.get_annotations(klass))
        declared.update(_slot_names(klass))
        members.update(vars(klass))

    operations = {
        name
        for name, raw in members.items()
        if isinstance(raw, _OPERATION_TYPES) and name not in RESERVED_MEMBERS
    }
    properties = {name for name, raw in members.items() if isinstance(raw, property)}
    class_data = {name for name, raw in members.items() if not isinstance(raw, _OPERATION_TYPES)}
    fields = {
        name
        for name in declared | class_data | properties
        if name not in operations and not is_special_name(name) and name not in _MACHINERY_ATTRS
    }

    return TypeDescriptor(
        target=target,
        operations=frozenset(operations),
        fields=frozenset(fields),
        properties=frozenset(properties),
        abstract_members=frozenset(getattr(target, "__abstractmethods__", frozenset())),
    )


def _slot_names(klass: type) -> tuple[str, ...]:
    slots = vars(klass).get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(slots)


def is_proxy_class(klass: type) -> bool:
    return vars(klass).get(_PROXY_MARKER, False) is True


def instantiate_proxy(
    descriptor: TypeDescriptor,
    intercept: Collection[str],
    dispatch: Dispatch,
    tags: Mapping[str, object],
    constructor_args: tuple[object, ...] | None,
    constructor_kwargs: Mapping[str, object],
) -> object:
    """Create an instance of a private subclass of descriptor.target.

    Each call builds its own subclass, so later changes to one proxy's class
    (extra interceptors, shadowed properties) never leak into another.

    Args:
        descriptor: Description of the target class
        intercept: Member names redirected to dispatch
        dispatch: Receives (member, args, kwargs) for every intercepted call
        tags: Extra class attributes for the subclass
        constructor_args: None to skip __init__ entirely; otherwise the
            positional arguments for the real constructor
        constructor_kwargs: Keyword arguments for the real constructor

    Raises:
        ConstructionError: If the real constructor was requested and raised
    """
    target = descriptor.target
    namespace: dict[str, object] = {"__module__": target.__module__, _PROXY_MARKER: True, **tags}
    for name in sorted(intercept):
        namespace[name] = _make_interceptor(descriptor, name, dispatch)

    proxy_class = types.new_class(
        f"{target.__name__}Double",
        (target,),
        exec_body=lambda ns: ns.update(namespace),
    )
    logger.debug(
        "Built %s intercepting %s", proxy_class.__name__, ", ".join(sorted(intercept)) or "nothing"
    )

    if constructor_args is None:
        return _allocate(proxy_class)

    try:
        return proxy_class(*constructor_args, **constructor_kwargs)
    except Exception as exc:
        raise ConstructionError(
            f"Constructor of {descriptor.name} raised {type(exc).__name__}: {exc}"
        ) from exc


def install_interceptor(
    proxy_class: type, descriptor: TypeDescriptor, name: str, dispatch: Dispatch
) -> None:
    """Redirect one more member of an existing proxy class to dispatch."""
    if not is_proxy_class(proxy_class):
        raise TypeError(f"{proxy_class!r} is not a stubkit proxy class")
    setattr(proxy_class, name, _make_interceptor(descriptor, name, dispatch))


def _allocate(proxy_class: type) -> object:
    """Create an instance without running any Python-level __new__ or __init__.

    Allocation goes through the nearest builtin base (usually object), the
    way copyreg reconstructs instances.
    """
    base = next(klass for klass in proxy_class.__mro__ if not klass.__flags__ & _HEAPTYPE)
    return base.__new__(proxy_class)


def _make_interceptor(descriptor: TypeDescriptor, name: str, dispatch: Dispatch) -> object:
    original = descriptor.raw_member(name)

    if isinstance(original, property):
        return property(lambda _self: dispatch(name, (), {}), doc=original.__doc__)

    if isinstance(original, staticmethod):

        def static_interceptor(*args: object, **kwargs: object) -> object:
            return dispatch(name, args, kwargs)

        return staticmethod(_wraps(static_interceptor, original.__func__))

    if isinstance(original, classmethod):

        def class_interceptor(_cls: type, *args: object, **kwargs: object) -> object:
            return dispatch(name, args, kwargs)

        return classmethod(_wraps(class_interceptor, original.__func__))

    def interceptor(_self: object, *args: object, **kwargs: object) -> object:
        return dispatch(name, args, kwargs)

    return _wraps(interceptor, original)


def _wraps(interceptor: Callable[..., object], original: object) -> Callable[..., object]:
    if original is None:
        return interceptor
    functools.update_wrapper(interceptor, original)  # type: ignore[arg-type]
    # update_wrapper copies __isabstractmethod__, which would keep the proxy abstract
    vars(interceptor).pop("__isabstractmethod__", None)
    return interceptor


def force_set_field(obj: object, name: str, value: object) -> None:
    """Assign a field, bypassing the object's own attribute protocol.

    On a proxy, a property (read-only or not) is shadowed on the proxy's
    private class. On any other object a property goes through its setter.
    """
    owner = type(obj)
    if is_proxy_class(owner) and isinstance(inspect.getattr_static(owner, name, None), property):
        setattr(owner, name, value)
        return
    object.__setattr__(obj, name, value)


def force_get_field(obj: object, name: str) -> object:
    """Read an attribute without going through a custom __getattribute__."""
    return object.__getattribute__(obj, name)
