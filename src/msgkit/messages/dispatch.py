"""Dispatch plumbing shared by generated message and entrypoint types.

Dispatching calls `receiver.<operation>(ctx, *fields)` and returns its result
unchanged. Errors raised by the method go through an error conversion rule:

    - errors already of the receiver's declared `Error` type pass through,
    - StdError instances become `Error.from_std_error(err)` (or `Error(str(err))`),
    - any other exception propagates as it is.

A caller may replace the rule by passing `convert_error`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from pydantic_core import PydanticSerializationError, to_json

from msgkit.core.schema.models import Operation
from msgkit.errors import DispatchError, SerializationError, StdError

ErrorConverter = Callable[[Exception], Exception]
"""Signature: (raised_error) -> error_to_raise"""


def into_error(error_type: type[Exception] | None) -> ErrorConverter:
    """Conversion rule targeting a declared Error type.

    Args:
        error_type: Declared Error type, or None to leave every error unchanged.
    """

    def convert(error: Exception) -> Exception:
        if error_type is None or isinstance(error, error_type):
            return error
        if isinstance(error, StdError):
            from_std = getattr(error_type, "from_std_error", None)
            if from_std is not None:
                return from_std(error)
            return error_type(str(error))
        return error

    return convert


def declared_error(receiver: Any) -> type[Exception] | None:
    """The receiver's `Error` attribute when it is an exception type."""
    error_type = getattr(receiver, "Error", None)
    if isinstance(error_type, type) and issubclass(error_type, Exception):
        return error_type
    return None


def serialize_response(value: Any) -> bytes:
    """Encode a query result to JSON bytes.

    Raises:
        SerializationError: If the value has no JSON encoding.
    """
    try:
        return to_json(value, by_alias=True)
    except PydanticSerializationError as e:
        raise SerializationError(f"cannot serialize query response: {e}") from e


def invoke(
    receiver: Any,
    ctx: Any,
    operation: Operation,
    args: Sequence[Any],
    *,
    serialize: bool = False,
    convert_error: ErrorConverter | None = None,
) -> Any:
    """Call the receiver's implementation of an operation.

    Args:
        receiver: Object implementing the operation as a method.
        ctx: Runtime context, passed through untouched as the first argument.
        operation: Operation being dispatched.
        args: Field values in declaration order.
        serialize: Encode the result to JSON bytes (queries).
        convert_error: Error conversion rule; defaults to the receiver's `Error`.

    Returns:
        The method's result, or its JSON encoding when `serialize` is set.
    """
    convert = convert_error or into_error(declared_error(receiver))
    try:
        method = getattr(receiver, operation.method_name, None)
        if not callable(method):
            raise DispatchError(
                f"{type(receiver).__name__} does not implement `{operation.method_name}`"
            )
        result = method(ctx, *args)
        return serialize_response(result) if serialize else result
    except Exception as e:
        converted = convert(e)
        if converted is e:
            raise
        raise converted from e
