"""Pydantic models describing provider payloads and authentication results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ErrorInformation


class ProviderType(str, Enum):
    FACEBOOK = "Facebook"


class MeResult(BaseModel):
    """Subset of the Graph API ``me`` node."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(gt=0)
    first_name: str | None = None
    last_name: str | None = None
    link: str | None = None
    locale: str | None = None
    name: str | None = None
    timezone: int | None = None
    username: str | None = None
    verified: bool | None = None


class AccessToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    public_token: str
    expires_on: datetime


class UserInformation(BaseModel):
    """Provider profile normalised for callers."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    name: str | None = None
    user_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    locale: str | None = None
    link: str | None = None
    timezone: int | None = None
    verified: bool | None = None

    @classmethod
    def from_me(cls, me: MeResult) -> "UserInformation":
        return cls(
            id=me.id,
            name=me.name,
            user_name=me.username,
            first_name=me.first_name,
            last_name=me.last_name,
            locale=me.locale,
            link=me.link,
            timezone=me.timezone,
            verified=me.verified,
        )


class AuthenticatedClient(BaseModel):
    """Outcome of a single authentication callback.

    Holds either ``user_information`` or ``error_information``, never both and
    never neither.
    """

    model_config = ConfigDict(frozen=True)

    provider_type: ProviderType
    access_token: AccessToken | None = None
    user_information: UserInformation | None = None
    error_information: ErrorInformation | None = Field(default=None)

    @model_validator(mode="after")
    def _check_outcome(self) -> "AuthenticatedClient":
        if self.error_information is None and self.user_information is None:
            raise ValueError("Authenticated client requires user information or error information")
        if self.error_information is not None and self.user_information is not None:
            raise ValueError("Authenticated client cannot carry both user and error information")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.error_information is None


__all__ = [
    "AccessToken",
    "AuthenticatedClient",
    "MeResult",
    "ProviderType",
    "UserInformation",
]
