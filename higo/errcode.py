"""Registered error codes, the exceptions they raise and validation errors."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, ClassVar, Protocol

__all__ = [
    "CodeRegistry",
    "DaoException",
    "ErrorCode",
    "HigoException",
    "ValidateError",
    "container",
    "dao_throw",
    "throw",
]


class HigoException(Exception):
    """An application error carrying a numeric code and optional data."""

    def __init__(self, message: str = "", code: int = 0, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"code={self.code!r}, data={self.data!r})"
        )


class DaoException(HigoException):
    """An error raised by the data access layer."""


class CodeRegistry:
    """Maps numeric codes to message templates.

    An optional ``autoload`` callable receives the registry and fills it the
    first time a message is looked up.
    """

    def __init__(self, autoload: Callable[[CodeRegistry], Any] | None = None) -> None:
        self.autoload = autoload
        self._messages: dict[int, str] = {}
        self._loaded = False
        self._lock = threading.RLock()

    def put(self, code: int, message: str) -> CodeRegistry:
        """Register ``message`` for ``code``; returns the registry for chaining."""
        with self._lock:
            self._messages[int(code)] = message
        return self

    def _ensure_loaded(self) -> None:
        with self._lock:
            if self._loaded or self.autoload is None:
                return
            self._loaded = True
            self.autoload(self)

    def get(self, code: int, *args: Any) -> str:
        """The message for ``code``, %-formatted with ``args`` when any are given."""
        self._ensure_loaded()
        with self._lock:
            message = self._messages.get(int(code))
        if message is None:
            raise LookupError(f"code {int(code)} is not registered")
        return message % args if args else message

    def __contains__(self, code: object) -> bool:
        self._ensure_loaded()
        try:
            return int(code) in self._messages  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return False

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._messages)


container = CodeRegistry()


class ErrorCode(int):
    """An integer error code whose message lives in :attr:`registry`."""

    registry: ClassVar[CodeRegistry] = container

    def message(self, *args: Any) -> str:
        return self.registry.get(self, *args)

    def error(self, *args: Any) -> HigoException:
        """An exception for this code, returned rather than raised."""
        return HigoException(self.message(*args), int(self))

    def throw(self, *args: Any) -> None:
        raise HigoException(self.message(*args), int(self), None)

    def throw_data(self, data: Any, *args: Any) -> None:
        raise HigoException(self.message(*args), int(self), data)


class _Code(Protocol):
    def message(self, *args: Any) -> str: ...

    def __int__(self) -> int: ...


class ValidateError(Exception):
    """A validation failure described by an error code."""

    def __init__(self, code: _Code) -> None:
        super().__init__(code.message())
        self.code = code

    def get(self) -> dict[str, Any]:
        """The code and its message."""
        return {"code": int(self.code), "message": self.code.message()}


def throw(message: str, code: int) -> None:
    """Raise a :class:`HigoException` with empty data."""
    raise HigoException(message, code, "")


def dao_throw(message: str, code: int) -> None:
    """Raise a :class:`DaoException` with empty data."""
    raise DaoException(message, code, "")