# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Hashable
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

__all__ = ("KeyedModel",)


class KeyedModel(BaseModel):
    """Pydantic base for elements that index themselves by one of their fields.

    Subclasses declare the field holding the key and name it in
    ``key_field``::

        class User(KeyedModel):
            key_field: ClassVar[str] = "email"

            email: str
            name: str = ""

    Assignments are validated, so mutating the key field keeps its declared
    type. The model is not frozen: mutating the key is expected, and a
    :class:`~dualset.DualHashSet` holding the model refiles it when the
    mutation goes through one of its mutation protocols.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="forbid",
        use_attribute_docstrings=True,
        validate_assignment=True,
    )

    key_field: ClassVar[str]
    """Name of the field holding the key; set by every concrete subclass."""

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        field = getattr(cls, "key_field", None)
        if field is None:
            return
        if field not in cls.model_fields:
            raise TypeError(
                f"{cls.__name__}.key_field names '{field}', "
                f"which is not a field of the model."
            )

    def key(self) -> Hashable:
        """Returns the current value of the key field."""
        return getattr(self, self.key_field)
