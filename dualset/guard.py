# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Hashable
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic

from ._concepts import Keyed, T
from ._errors import GuardError, KeyNotFoundError

if TYPE_CHECKING:
    from .hash_set import DualHashSet

__all__ = ("GuardState", "ValueGuard")


class GuardState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    RELEASED = "released"


class ValueGuard(Generic[T]):
    """Scoped mutable access to one element of a :class:`DualHashSet`.

    A guard remembers a container and a key. Entering it takes the
    container's exclusive borrow and yields the element filed under that
    key; every read and write of :attr:`value` goes to the container's
    current entry at the remembered key. On exit, whether the block ends
    normally or by an exception, the element's key is re-read and the
    element is refiled if it changed. That happens exactly once.

    Guards are single-use: enter once, release once.
    """

    __slots__ = ("_owner", "_key", "_state")

    def __init__(self, owner: DualHashSet[T], key: Hashable, /):
        self._owner = owner
        self._key = key
        self._state = GuardState.PENDING

    @property
    def key(self) -> Hashable:
        """The key the guard was issued for."""
        return self._key

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is GuardState.ACTIVE

    def _require_active(self) -> None:
        if self._state is not GuardState.ACTIVE:
            raise GuardError(
                f"guard for {self._key!r} is {self._state.value}",
                details={"key": self._key, "state": self._state.value},
            )

    @property
    def value(self) -> T:
        self._require_active()
        return self._owner._entries[self._key]

    @value.setter
    def value(self, item: T) -> None:
        """Replaces the guarded element; it is refiled on release."""
        self._require_active()
        if not isinstance(item, Keyed):
            raise TypeError(
                f"Item must provide a key() method, "
                f"not {item.__class__.__name__}."
            )
        self._owner._entries[self._key] = item

    def __enter__(self) -> T:
        if self._state is not GuardState.PENDING:
            raise GuardError(
                "guard can only be entered once",
                details={"key": self._key, "state": self._state.value},
            )
        self._owner._acquire()
        if self._key not in self._owner._entries:
            self._owner._release()
            self._state = GuardState.RELEASED
            raise KeyNotFoundError.from_key(self._key)
        self._state = GuardState.ACTIVE
        return self._owner._entries[self._key]

    def release(self) -> None:
        """Refiles the element if its key changed and ends the borrow.

        Safe to call more than once; only the first call has an effect. A
        guard released before being entered never touches the container.
        """
        if self._state is GuardState.RELEASED:
            return
        was_active = self._state is GuardState.ACTIVE
        self._state = GuardState.RELEASED
        if not was_active:
            return
        try:
            self._owner._refile(self._key, self._owner._entries[self._key])
        finally:
            self._owner._release()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"ValueGuard(key={self._key!r}, state={self._state.value})"
