"""Session credential value object."""

from __future__ import annotations

from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field

from cardsync.domain.shared.value_objects.secure_string import SecureString

XSRF_COOKIE_NAME = "XSRF-TOKEN"


class SessionCredential(BaseModel):
    """
    Cookie jar and anti-forgery token of an authenticated portal session.

    Only valid while the controlled browser page that produced it stays
    open. Never persisted; values are wrapped in SecureString so they
    cannot leak into logs.
    """

    cookies: dict[str, SecureString] = Field(default_factory=dict)
    xsrf_token: SecureString | None = Field(
        default=None,
        description="Decoded value of the XSRF-TOKEN cookie",
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_cookie_jar(cls, jar: dict[str, str]) -> SessionCredential:
        """Build a credential from the browser's name->value cookie mapping."""
        cookies = {name: SecureString(value) for name, value in jar.items() if value}
        raw_token = jar.get(XSRF_COOKIE_NAME)
        xsrf_token = SecureString(unquote(raw_token)) if raw_token else None
        return cls(cookies=cookies, xsrf_token=xsrf_token)

    @property
    def has_xsrf_token(self) -> bool:
        return self.xsrf_token is not None

    @property
    def cookie_names(self) -> list[str]:
        return sorted(self.cookies)

    def cookie_values(self) -> dict[str, str]:
        """Expose plain cookie values for the HTTP client. Handle with care."""
        return {name: value.get_value() for name, value in self.cookies.items()}

    def __repr__(self) -> str:
        return (
            f"SessionCredential(cookies={self.cookie_names}, "
            f"xsrf_token={'*****' if self.has_xsrf_token else None})"
        )

    def __str__(self) -> str:
        return repr(self)
