"""Builtin formula functions and the registry that dispatches them.

Formula values are ``str`` (text), ``bytes`` (binary), or ``Decimal``
(numbers). Functions check their argument types and raise
:class:`TypeMismatchError` instead of coercing silently.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import threading
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Union
from urllib.parse import quote

from credential_injection.core.exceptions import (
    ArgumentCountError,
    TypeMismatchError,
    UnknownFunctionError,
)

Value = Union[str, bytes, Decimal]


class Number(Decimal):
    """A numeric formula value that renders exactly as it was written.

    ``Decimal("007")`` prints as ``7``; a ``Number`` keeps ``007`` so
    numeric literals concatenate verbatim.
    """

    def __new__(cls, text: str) -> Number:
        number = super().__new__(cls, text)
        number._text = text
        return number

    def __str__(self) -> str:
        return self._text


@dataclass(frozen=True)
class FormulaFunction:
    """A callable exposed to formulas.

    Args:
        name: Upper-case function name.
        fn: Implementation taking positional ``Value`` arguments.
        min_args: Minimum argument count.
        max_args: Maximum argument count, or ``None`` for variadic.
    """

    name: str
    fn: Callable[..., Value]
    min_args: int
    max_args: int | None

    def __call__(self, *args: Value) -> Value:
        if len(args) < self.min_args or (self.max_args is not None and len(args) > self.max_args):
            if self.max_args is None:
                expected = f"at least {self.min_args}"
            elif self.min_args == self.max_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args}-{self.max_args}"
            raise ArgumentCountError(self.name, expected, len(args))
        return self.fn(*args)


class FunctionRegistry:
    """Case-insensitive registry of formula functions.

    New functions can be added without touching the grammar; every call
    ``NAME(...)`` is dispatched here at evaluation time.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._functions: dict[str, FormulaFunction] = {}

    def register(
        self,
        name: str,
        fn: Callable[..., Value],
        min_args: int = 1,
        max_args: int | None = 1,
    ) -> None:
        """Register or replace a function."""
        key = name.upper()
        with self._lock:
            self._functions[key] = FormulaFunction(key, fn, min_args, max_args)

    def get(self, name: str) -> FormulaFunction:
        """Return the function registered under *name*.

        Raises:
            UnknownFunctionError: If no such function is registered.
        """
        with self._lock:
            function = self._functions.get(name.upper())
        if function is None:
            raise UnknownFunctionError(name)
        return function

    def names(self) -> list[str]:
        """Return registered function names, sorted."""
        with self._lock:
            return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            return name.upper() in self._functions


# ---------------------------------------------------------------------------
# Builtins
# ---------------------------------------------------------------------------


def _as_bytes(operation: str, value: Value) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeMismatchError(operation, "text or binary", value)


def _as_text(operation: str, value: Value) -> str:
    if isinstance(value, str):
        return value
    raise TypeMismatchError(operation, "text", value)


def _base64(value: Value) -> str:
    return base64.b64encode(_as_bytes("BASE64", value)).decode("ascii")


def _blob(value: Value) -> bytes:
    return _as_text("BLOB", value).encode("utf-8")


def _text(value: Value) -> str:
    if isinstance(value, bytes):
        raise TypeMismatchError("TEXT", "text or number", value)
    return str(value)


def _upper(value: Value) -> str:
    return _as_text("UPPER", value).upper()


def _lower(value: Value) -> str:
    return _as_text("LOWER", value).lower()


def _urlencode(value: Value) -> str:
    return quote(_as_text("URLENCODE", value), safe="")


def _hex(value: Value) -> str:
    return _as_bytes("HEX", value).hex()


def _sha256(value: Value) -> bytes:
    return hashlib.sha256(_as_bytes("SHA256", value)).digest()


def _hmacsha256(data: Value, key: Value) -> bytes:
    return hmac.new(_as_bytes("HMACSHA256", key), _as_bytes("HMACSHA256", data), hashlib.sha256).digest()


def default_functions() -> FunctionRegistry:
    """Return a new registry holding the builtin functions.

    Each call returns an independent registry, so extending one
    evaluator's functions never affects another.
    """
    registry = FunctionRegistry()
    registry.register("BASE64", _base64)
    registry.register("BLOB", _blob)
    registry.register("TEXT", _text)
    registry.register("UPPER", _upper)
    registry.register("LOWER", _lower)
    registry.register("URLENCODE", _urlencode)
    registry.register("HEX", _hex)
    registry.register("SHA256", _sha256)
    registry.register("HMACSHA256", _hmacsha256, min_args=2, max_args=2)
    return registry
