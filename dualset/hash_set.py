# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Hashable, Iterable, Iterator
from copy import deepcopy
from typing import Any, Generic, TypeVar

from typing_extensions import Self

from ._concepts import Keyed, T
from ._errors import BorrowError, KeyMismatchError, KeyNotFoundError
from .config import settings
from .guard import ValueGuard

__all__ = ("DualHashSet",)

logger = logging.getLogger(__name__)

R = TypeVar("R")
D = TypeVar("D")


class DualHashSet(Generic[T]):
    """A set of values that are looked up by their own key.

    Every stored value satisfies :class:`~dualset.Keyed` and is filed under
    whatever its ``key()`` returns. Unlike a ``dict`` or ``set``, changing a
    stored value's key is not a logic error as long as the change is made
    through :meth:`modify`, :meth:`modify_all`, :meth:`retain` or a guard
    from :meth:`get_mut`: the value is refiled under its new key before
    control returns to any other observer.

    Lookups accept anything that hashes and compares equal to a stored key.

    Args:
        items: Values inserted in turn; later values displace earlier ones
            with the same key.
        strict_keys: Reject factory-built values whose key differs from the
            requested key in :meth:`get_or_insert_with`. Defaults to
            ``settings.DUALSET_STRICT_KEYS``.
    """

    __slots__ = ("_entries", "_borrowed", "strict_keys")

    def __init__(
        self,
        items: Iterable[T] | None = None,
        *,
        strict_keys: bool | None = None,
    ):
        self._entries: dict[Hashable, T] = {}
        self._borrowed = False
        self.strict_keys = (
            settings.DUALSET_STRICT_KEYS if strict_keys is None else strict_keys
        )
        if items is not None:
            self.extend(items)

    # ------------------------------------------------------------------
    # exclusivity
    # ------------------------------------------------------------------

    @property
    def is_borrowed(self) -> bool:
        """True while a guard or a mutation callback holds the container."""
        return self._borrowed

    def _check_access(self) -> None:
        if self._borrowed:
            raise BorrowError()

    def _acquire(self) -> None:
        self._check_access()
        self._borrowed = True

    def _release(self) -> None:
        self._borrowed = False

    @contextlib.contextmanager
    def _exclusive(self) -> Iterator[None]:
        self._acquire()
        try:
            yield
        finally:
            self._release()

    def _refile(self, old_key: Hashable, item: T) -> None:
        """Moves ``item`` from ``old_key`` to its current key if they differ."""
        new_key = item.key()
        if new_key == old_key:
            return
        del self._entries[old_key]
        self._file(new_key, item)
        logger.debug("Relocated element from %r to %r", old_key, new_key)

    def _guarded(self, view: Iterable[D]) -> Iterator[D]:
        """Yields from a view of the entries, refusing while borrowed."""
        for entry in view:
            self._check_access()
            yield entry

    def _file(self, key: Hashable, item: T) -> T | None:
        displaced = self._entries.get(key)
        self._entries[key] = item
        if displaced is not None:
            logger.debug("Displaced element previously filed under %r", key)
        return displaced

    # ------------------------------------------------------------------
    # core operations
    # ------------------------------------------------------------------

    def insert(self, item: T) -> T | None:
        """Files ``item`` under its key, returning the displaced occupant."""
        self._check_access()
        if not isinstance(item, Keyed):
            raise TypeError(
                f"Item must provide a key() method, "
                f"not {item.__class__.__name__}."
            )
        return self._file(item.key(), item)

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.insert(item)

    def get(self, key: Hashable, default: D = None) -> T | D:
        self._check_access()
        return self._entries.get(key, default)

    def contains(self, key: Hashable) -> bool:
        self._check_access()
        return key in self._entries

    def remove(self, key: Hashable) -> T | None:
        """Removes and returns the element filed under ``key``, if any."""
        self._check_access()
        return self._entries.pop(key, None)

    def is_empty(self) -> bool:
        return len(self) == 0

    def clear(self) -> None:
        self._check_access()
        self._entries.clear()

    def keys(self) -> Iterator[Hashable]:
        """Returns a fresh iterator over the stored keys, in no particular order."""
        self._check_access()
        return (item.key() for item in self._guarded(self._entries.values()))

    def values(self) -> Iterator[T]:
        """Returns a fresh iterator over the stored elements."""
        self._check_access()
        return self._guarded(self._entries.values())

    def items(self) -> Iterator[tuple[Hashable, T]]:
        self._check_access()
        return self._guarded(self._entries.items())

    def drain(self) -> Iterator[T]:
        """Empties the container and iterates over the removed elements."""
        self._check_access()
        drained = list(self._entries.values())
        self._entries.clear()
        return iter(drained)

    def copy(self) -> Self:
        """Returns a new container holding deep copies of every element.

        Elements are copied rather than shared: a value mutated through one
        container would otherwise be filed under a stale key in the other.
        """
        self._check_access()
        new = self.__class__(strict_keys=self.strict_keys)
        for key, item in self._entries.items():
            new._entries[key] = deepcopy(item)
        return new

    __copy__ = copy

    def __len__(self) -> int:
        self._check_access()
        return len(self._entries)

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __contains__(self, key: Any) -> bool:
        return self.contains(key)

    def __iter__(self) -> Iterator[T]:
        return self.values()

    def __getitem__(self, key: Hashable) -> T:
        """Returns the element at ``key``; the caller asserts it is present.

        Raises:
            KeyNotFoundError: If nothing is filed under ``key``.
        """
        self._check_access()
        try:
            return self._entries[key]
        except KeyError:
            raise KeyNotFoundError.from_key(key) from None

    def __repr__(self) -> str:
        if self._borrowed:
            return f"{self.__class__.__name__}(<borrowed>)"
        return f"{self.__class__.__name__}({list(self._entries.values())!r})"

    # ------------------------------------------------------------------
    # closure-based mutation
    # ------------------------------------------------------------------

    def modify(self, key: Hashable, func: Callable[[T], R]) -> R | None:
        """Applies ``func`` to the element at ``key`` and refiles it.

        ``func`` is called exactly once with the stored element and may
        mutate it freely, including its key. Afterwards the element is
        filed under its current key, displacing any occupant there. The
        container is exclusively borrowed while ``func`` runs.

        Returns:
            ``func``'s result, or ``None`` if ``key`` is absent.
        """
        with self._exclusive():
            item = self._entries.get(key)
            if item is None:
                return None
            try:
                return func(item)
            finally:
                self._refile(key, item)

    def retain(self, predicate: Callable[[T], bool]) -> None:
        """Keeps only the elements for which ``predicate`` returns true.

        ``predicate`` may mutate the element it receives, including its key.
        Every element present when ``retain`` starts is visited exactly
        once; kept elements end up filed under their post-call key and
        rejected ones are dropped. If ``predicate`` raises, decisions made
        so far are applied, the failing element is kept, and the exception
        propagates.
        """
        with self._exclusive():
            snapshot = list(self._entries.items())
            decisions: list[tuple[Hashable, T, bool]] = []
            try:
                for key, item in snapshot:
                    keep = True
                    try:
                        keep = bool(predicate(item))
                    finally:
                        decisions.append((key, item, keep))
            finally:
                self._apply_decisions(decisions)

    def modify_all(self, func: Callable[[T], Any]) -> None:
        """Applies ``func`` to every element, refiling those whose key changed."""

        def _keep(item: T) -> bool:
            func(item)
            return True

        self.retain(_keep)

    def _apply_decisions(
        self, decisions: list[tuple[Hashable, T, bool]]
    ) -> None:
        # all changed slots are vacated before any element is refiled
        moved: list[tuple[Hashable, T]] = []
        for key, item, keep in decisions:
            new_key = item.key()
            if keep and new_key == key:
                continue
            del self._entries[key]
            if keep:
                moved.append((key, item))
            else:
                logger.debug("Dropped element filed under %r", key)
        for old_key, item in moved:
            new_key = item.key()
            self._file(new_key, item)
            logger.debug("Relocated element from %r to %r", old_key, new_key)

    # ------------------------------------------------------------------
    # guarded mutation
    # ------------------------------------------------------------------

    def get_mut(self, key: Hashable) -> ValueGuard[T] | None:
        """Returns a guard over the element at ``key``, or ``None``.

        Use the guard as a context manager; on leaving the block the element
        is refiled if its key changed::

            if (guard := users.get_mut("ann@example.com")) is not None:
                with guard as user:
                    user.email = "ann@example.org"
        """
        self._check_access()
        if key not in self._entries:
            return None
        return ValueGuard(self, key)

    def get_or_insert_with(
        self, key: Hashable, factory: Callable[[Hashable], T]
    ) -> ValueGuard[T]:
        """Returns a guard at ``key``, building the element first if absent.

        ``factory(key)`` is only called when ``key`` is absent. Its result is
        expected to report ``key`` as its own key. If it does not, strict
        containers raise :class:`~dualset.KeyMismatchError` and insert
        nothing; otherwise the element is filed under ``key`` anyway and
        moved to its real key at the next relocation check (guard release,
        :meth:`modify`, :meth:`retain`). The container is exclusively
        borrowed while ``factory`` runs.
        """
        with self._exclusive():
            if key not in self._entries:
                item = factory(key)
                if not isinstance(item, Keyed):
                    raise TypeError(
                        f"Factory must build an item with a key() method, "
                        f"not {item.__class__.__name__}."
                    )
                if (actual := item.key()) != key:
                    if self.strict_keys:
                        raise KeyMismatchError.from_keys(key, actual)
                    logger.warning(
                        "Factory for %r built an element keyed %r; "
                        "it will be relocated at the next check",
                        key,
                        actual,
                    )
                self._entries[key] = item
        return ValueGuard(self, key)
