# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "BorrowError",
    "DualSetError",
    "GuardError",
    "KeyMismatchError",
    "KeyNotFoundError",
)


class DualSetError(Exception):
    """Base class for dualset errors.

    ``details`` carries the keys involved and is appended to the message
    when the error is rendered.
    """

    default_message: ClassVar[str] = "dualset error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        detail = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({detail})"

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class KeyNotFoundError(DualSetError):
    """Raised by indexed access when no element is filed under the key."""

    default_message = "key not found"
    __slots__ = ()

    @classmethod
    def from_key(cls, key: Any) -> "KeyNotFoundError":
        return cls(details={"key": key})


class BorrowError(DualSetError):
    """Raised when the container is accessed while exclusively borrowed."""

    default_message = "container is already mutably borrowed"
    __slots__ = ()


class GuardError(DualSetError):
    """Raised when a guard is used outside its active scope."""

    default_message = "guard is not active"
    __slots__ = ()


class KeyMismatchError(DualSetError):
    """Raised in strict mode when a factory builds an element with another key."""

    default_message = "factory produced an element with a different key"
    __slots__ = ()

    @classmethod
    def from_keys(cls, expected: Any, actual: Any) -> "KeyMismatchError":
        return cls(
            f"factory produced key {actual!r}, expected {expected!r}",
            details={"expected": expected, "actual": actual},
        )
