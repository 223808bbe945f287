# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Hashable
from typing import Protocol, TypeVar, runtime_checkable

K = TypeVar("K", bound=Hashable, covariant=True)


@runtime_checkable
class Keyed(Protocol[K]):
    """A value that carries its own index key.

    ``key()`` must be side-effect free and cheap. Its result may change when
    the value is mutated; containers holding the value are responsible for
    refiling it when that happens.
    """

    def key(self) -> K: ...


T = TypeVar("T", bound=Keyed)

__all__ = (
    "K",
    "Keyed",
    "T",
)
