"""Masked wrapper for credentials, session cookies and API tokens."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import GetCoreSchemaHandler, SecretStr
from pydantic_core import core_schema

MASK = "*****"


@dataclass(frozen=True)
class SecureString:
    """
    A secret that never shows up in logs, reprs or serialized models.

    Holds the portal login, every session cookie, the XSRF token and the
    ledger token. Only ``get_value()`` hands out the plain text, and it is
    called at the last moment (form fill, HTTP headers).
    """

    _value: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self._value, str):
            msg = f"Secret must be a string, got {type(self._value).__name__}"
            raise TypeError(msg)
        if not self._value:
            msg = "Secret must not be empty"
            raise ValueError(msg)

    @classmethod
    def from_secret(cls, secret: SecretStr) -> SecureString:
        """Unwrap a pydantic ``SecretStr`` from settings into a domain secret."""
        return cls(secret.get_secret_value())

    def get_value(self) -> str:
        return self._value

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"SecureString({MASK})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        """Accept plain strings or ``SecretStr``; always dump the mask."""
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda _: MASK,
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def _coerce(cls, value: Any) -> SecureString:
        if isinstance(value, cls):
            return value
        if isinstance(value, SecretStr):
            return cls.from_secret(value)
        return cls(value)
