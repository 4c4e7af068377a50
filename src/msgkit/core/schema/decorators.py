"""Decorator front-end producing declaration documents from Python classes.

Decorators only attach a declaration to the class they wrap; nothing is
registered globally. A build collects the classes explicitly with
assemble_schema().

Usage:
    @interface(error=OwnableError)
    class Ownable:
        @msg("exec")
        def transfer_owner(self, ctx, new_owner: str) -> Response: ...

        @msg("query")
        def owner(self, ctx) -> str: ...

    @contract(error=ContractError, messages=[Ownable, (Pausable, "Pause")])
    class Registry(Ownable, Pausable):
        @msg("init")
        def instantiate(self, ctx, admin: str) -> Response: ...

    schema = assemble_schema(Registry)
"""

from __future__ import annotations

import inspect
import sys
import types as pytypes
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar, Union, get_args, get_origin, overload

from msgkit.core.schema.declarations import (
    ContractDecl,
    GenericDecl,
    InterfaceDecl,
    MessagesDecl,
    OperationDecl,
    ParamDecl,
    SchemaDecl,
)
from msgkit.core.schema.models import Schema
from msgkit.core.schema.parser import parse_schema

F = TypeVar("F", bound=Callable[..., Any])

_DECLARATION_ATTR = "__msgkit_declaration__"
_TYPES_ATTR = "__msgkit_types__"
_USES_ATTR = "__msgkit_interfaces__"
_MSG_ATTR = "__msgkit_msg__"

_CONTAINER_NAMES = {list: "list", dict: "dict", tuple: "tuple", set: "set"}
_SCALAR_NAMES = {str: "str", int: "int", float: "float", bool: "bool"}

ComposedRef = type | str | tuple[type | str, str] | MessagesDecl
"""Ways to name a composed interface: class, name, (class or name, variant), or a full decl."""


@dataclass(frozen=True, slots=True)
class MsgMarker:
    """Category tag attached to a method by @msg."""

    category: str
    resp: Any = None


def msg(category: str, *, resp: Any = None) -> Callable[[F], F]:
    """Mark a method as an operation of the given category.

    Args:
        category: Category tag ("init", "exec", "query", "privileged",
            "migrate", "reply" or an alias). Validated at assembly time.
        resp: Query response type overriding the return annotation.
    """

    def decorator(fn: F) -> F:
        setattr(fn, _MSG_ATTR, MsgMarker(category=category, resp=resp))
        return fn

    return decorator


def annotation_to_expr(annotation: Any, discovered: dict[str, Any]) -> str:
    """Convert a Python annotation into a type expression.

    Classes other than builtin scalars are recorded in `discovered` under
    their name so the compiler can resolve them later.

    Raises:
        TypeError: For annotations with no type expression form.
    """
    if isinstance(annotation, str):
        text = annotation.strip().strip("'\"")
        if text.endswith("| None"):
            return f"Optional[{text[: -len('| None')].strip()}]"
        return text
    if annotation is None or annotation is type(None):
        return "None"
    if annotation is Any:
        return "Any"
    if isinstance(annotation, TypeVar):
        return annotation.__name__

    origin = get_origin(annotation)
    if origin is not None:
        args = get_args(annotation)
        if origin is Union or origin is pytypes.UnionType:
            rest = [arg for arg in args if arg is not type(None)]
            if len(rest) == 1 and len(args) == 2:
                return f"Optional[{annotation_to_expr(rest[0], discovered)}]"
            raise TypeError(f"union annotation `{annotation}` has no type expression form")
        name = _CONTAINER_NAMES.get(origin) or _class_name(origin, discovered)
        inner = ", ".join(annotation_to_expr(arg, discovered) for arg in args if arg is not ...)
        return f"{name}[{inner}]" if inner else name

    if isinstance(annotation, type):
        return _SCALAR_NAMES.get(annotation) or _class_name(annotation, discovered)
    raise TypeError(f"annotation `{annotation!r}` has no type expression form")


def _class_name(cls: Any, discovered: dict[str, Any]) -> str:
    name = getattr(cls, "__name__", None)
    if name is None:
        raise TypeError(f"annotation `{cls!r}` has no type expression form")
    discovered.setdefault(name, cls)
    return name


def _type_params(cls: type) -> tuple[Any, ...]:
    return tuple(getattr(cls, "__type_params__", ()) or getattr(cls, "__parameters__", ()))


def _generic_decls(cls: type) -> list[GenericDecl]:
    generics: list[GenericDecl] = []
    for param in _type_params(cls):
        if not isinstance(param, TypeVar):
            continue
        bound = param.__bound__
        bounds = [getattr(bound, "__name__", str(bound))] if bound is not None else []
        generics.append(GenericDecl(name=param.__name__, bounds=bounds))
    return generics


def _annotations(fn: Callable[..., Any], owner: type) -> dict[str, Any]:
    scope = {param.__name__: param for param in _type_params(owner)}
    try:
        return inspect.get_annotations(fn, eval_str=True, locals=scope)
    except (NameError, AttributeError, SyntaxError, TypeError):
        return inspect.get_annotations(fn)


def _operation_decl(
    fn: Callable[..., Any], marker: MsgMarker, owner: type, discovered: dict[str, Any]
) -> OperationDecl:
    annotations = _annotations(fn, owner)
    signature = inspect.signature(fn)
    params: list[ParamDecl] = []
    # First two parameters are the receiver and the runtime context.
    for param in list(signature.parameters.values())[2:]:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise TypeError(
                f"{fn.__qualname__}: variadic parameter `{param.name}` is not supported"
            )
        annotation = annotations.get(param.name, Any)
        params.append(ParamDecl(name=param.name, type=annotation_to_expr(annotation, discovered)))

    returns = None
    if "return" in annotations:
        returns = annotation_to_expr(annotations["return"], discovered)
    response = annotation_to_expr(marker.resp, discovered) if marker.resp is not None else None

    code = getattr(fn, "__code__", None)
    return OperationDecl(
        name=fn.__name__,
        category=marker.category,
        params=params,
        returns=returns,
        response=response,
        doc=inspect.getdoc(fn),
        file=code.co_filename if code else None,
        line=code.co_firstlineno if code else None,
    )


def _operations(cls: type, discovered: dict[str, Any]) -> list[OperationDecl]:
    operations: list[OperationDecl] = []
    for attr in cls.__dict__.values():
        fn = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
        marker = getattr(fn, _MSG_ATTR, None)
        if isinstance(marker, MsgMarker):
            operations.append(_operation_decl(fn, marker, cls, discovered))
    return operations


def _error_name(cls: type, error: type | str | None) -> str | None:
    if error is None:
        own = cls.__dict__.get("Error")
        return own.__name__ if isinstance(own, type) else None
    if isinstance(error, type):
        if "Error" not in cls.__dict__:
            cls.Error = error  # type: ignore[attr-defined]
        return error.__name__
    return error


def _class_location(cls: type) -> tuple[str | None, int | None]:
    module = sys.modules.get(cls.__module__)
    file = getattr(module, "__file__", None)
    return file, getattr(cls, "__firstlineno__", None)


def _where(where: Iterable[str]) -> list[str]:
    return [str(predicate) for predicate in where]


@overload
def interface(cls: type) -> type: ...


@overload
def interface(
    cls: None = None,
    *,
    error: type | str | None = None,
    where: Iterable[str] = (),
    name: str | None = None,
) -> Callable[[type], type]: ...


def interface(
    cls: type | None = None,
    *,
    error: type | str | None = None,
    where: Iterable[str] = (),
    name: str | None = None,
) -> type | Callable[[type], type]:
    """Attach an interface declaration to a class.

    Supports the bare form (@interface, error taken from an `Error` class
    attribute) and the factory form (@interface(error=...)).

    Args:
        cls: The class to declare, or None if called with arguments.
        error: Declared Error type (class or name). A class is also bound as
            the `Error` attribute used by the default error conversion.
        where: Where-clause predicates such as "T: Clone".
        name: Interface name; defaults to the class name.
    """

    def decorator(c: type) -> type:
        discovered: dict[str, Any] = {}
        file, line = _class_location(c)
        decl = InterfaceDecl(
            name=name or c.__name__,
            error=_error_name(c, error),
            generics=_generic_decls(c),
            where=_where(where),
            operations=_operations(c, discovered),
            doc=inspect.getdoc(c),
            file=file,
            line=line,
        )
        setattr(c, _DECLARATION_ATTR, decl)
        setattr(c, _TYPES_ATTR, discovered)
        return c

    if cls is None:
        return decorator
    return decorator(cls)


def _messages_decl(ref: ComposedRef) -> tuple[MessagesDecl, type | None]:
    if isinstance(ref, MessagesDecl):
        return ref, None
    variant = None
    target: type | str
    if isinstance(ref, tuple):
        target, variant = ref
    else:
        target = ref
    if isinstance(target, type):
        decl = target.__dict__.get(_DECLARATION_ATTR)
        if not isinstance(decl, InterfaceDecl) or isinstance(decl, ContractDecl):
            raise TypeError(f"{target.__name__} is not decorated with @interface")
        return MessagesDecl(interface=decl.name, variant=variant), target
    return MessagesDecl(interface=target, variant=variant), None


@overload
def contract(cls: type) -> type: ...


@overload
def contract(
    cls: None = None,
    *,
    error: type | str | None = None,
    messages: Iterable[ComposedRef] = (),
    where: Iterable[str] = (),
    name: str | None = None,
) -> Callable[[type], type]: ...


def contract(
    cls: type | None = None,
    *,
    error: type | str | None = None,
    messages: Iterable[ComposedRef] = (),
    where: Iterable[str] = (),
    name: str | None = None,
) -> type | Callable[[type], type]:
    """Attach a contract declaration to a class.

    Only methods defined on the class itself become contract operations;
    interface methods it overrides are dispatched through the interfaces
    listed in `messages`, in that order.

    Args:
        cls: The class to declare, or None if called with arguments.
        error: Declared Error type (class or name).
        messages: Composed interfaces: decorated classes or names, optionally
            paired with a variant tag, e.g. `(Ownable, "Owner")`.
        where: Where-clause predicates.
        name: Contract name; defaults to the class name.
    """

    def decorator(c: type) -> type:
        discovered: dict[str, Any] = {}
        uses = [_messages_decl(ref) for ref in messages]
        file, line = _class_location(c)
        decl = ContractDecl(
            name=name or c.__name__,
            error=_error_name(c, error),
            generics=_generic_decls(c),
            where=_where(where),
            operations=_operations(c, discovered),
            messages=[use for use, _ in uses],
            doc=inspect.getdoc(c),
            file=file,
            line=line,
        )
        setattr(c, _DECLARATION_ATTR, decl)
        setattr(c, _TYPES_ATTR, discovered)
        setattr(c, _USES_ATTR, tuple(target for _, target in uses if target is not None))
        return c

    if cls is None:
        return decorator
    return decorator(cls)


def declaration_of(cls: type) -> InterfaceDecl | ContractDecl:
    """Declaration attached to a decorated class.

    Raises:
        TypeError: If the class is not decorated with @interface or @contract.
    """
    decl = cls.__dict__.get(_DECLARATION_ATTR)
    if not isinstance(decl, InterfaceDecl):
        raise TypeError(
            f"{cls.__name__} must be decorated with @interface or @contract. "
            f"Did you forget the decorator?"
        )
    return decl


def assemble_schema(*classes: type, types: Mapping[str, Any] | None = None) -> Schema:
    """Build a Schema from decorated classes.

    Interfaces composed by a contract are included automatically when they are
    given as classes in its `messages`.

    Args:
        classes: Decorated interface and contract classes, in declaration order.
        types: Extra Python types by name; they win over discovered ones.

    Raises:
        TypeError: If a class is not decorated.
        SchemaError: If the assembled declarations are invalid.
    """
    ordered: list[type] = []
    for cls in classes:
        for dependency in cls.__dict__.get(_USES_ATTR, ()):
            if dependency not in ordered and dependency not in classes:
                ordered.append(dependency)
        if cls not in ordered:
            ordered.append(cls)

    interfaces: list[InterfaceDecl] = []
    contracts: list[ContractDecl] = []
    discovered: dict[str, Any] = {}
    for cls in ordered:
        decl = declaration_of(cls)
        if isinstance(decl, ContractDecl):
            contracts.append(decl)
        else:
            interfaces.append(decl)
        discovered.update(cls.__dict__.get(_TYPES_ATTR, {}))
    discovered.update(types or {})

    document = SchemaDecl(interfaces=interfaces, contracts=contracts)
    return parse_schema(document, source="<decorators>", types=discovered)
