# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from ._concepts import Keyed
from ._errors import (
    BorrowError,
    DualSetError,
    GuardError,
    KeyMismatchError,
    KeyNotFoundError,
)
from .config import DualSetSettings, settings
from .element import KeyedModel
from .guard import GuardState, ValueGuard
from .hash_set import DualHashSet
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.DUALSET_LOG_LEVEL)

__all__ = (
    "__version__",
    "BorrowError",
    "DualHashSet",
    "DualSetError",
    "DualSetSettings",
    "GuardError",
    "GuardState",
    "KeyMismatchError",
    "KeyNotFoundError",
    "Keyed",
    "KeyedModel",
    "ValueGuard",
    "logger",
    "settings",
)
