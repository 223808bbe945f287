# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("DualSetSettings", "settings")


class DualSetSettings(BaseSettings, frozen=True):
    """Library settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DUALSET_STRICT_KEYS: bool = Field(
        default=False,
        description=(
            "Reject factory-built elements whose key differs from the "
            "requested key instead of deferring their relocation"
        ),
    )

    DUALSET_LOG_LEVEL: Literal[
        "CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"
    ] = "INFO"

    # Class variable to store the singleton instance
    _instance: ClassVar[Any] = None


# Create a singleton instance
settings = DualSetSettings()
DualSetSettings._instance = settings
