"""Error model for failed authentication attempts."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuthErrorKind(str, Enum):
    PROVIDER_ERROR = "PROVIDER_ERROR"
    STATE_MISMATCH = "STATE_MISMATCH"
    TOKEN_TRANSPORT = "TOKEN_TRANSPORT"
    TOKEN_STATUS = "TOKEN_STATUS"
    TOKEN_MALFORMED = "TOKEN_MALFORMED"
    PROFILE_TRANSPORT = "PROFILE_TRANSPORT"
    PROFILE_STATUS = "PROFILE_STATUS"


class AuthenticationException(RuntimeError):
    """Fault recorded when a provider round trip cannot complete.

    When the failure came from the transport layer the original exception is
    chained as ``__cause__``.
    """


class ErrorInformation(BaseModel):
    """Typed error returned to callers instead of raising."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str
    kind: AuthErrorKind
    exception: AuthenticationException | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.exception is not None:
            payload["exception"] = str(self.exception)
            cause = self.exception.__cause__
            if cause is not None:
                payload["cause"] = f"{type(cause).__name__}: {cause}"
        return payload


def wrap_fault(message: str, cause: BaseException | None = None) -> AuthenticationException:
    """Build an ``AuthenticationException`` chained to ``cause``."""

    fault = AuthenticationException(message)
    if cause is not None:
        fault.__cause__ = cause
    return fault


__all__ = ["AuthErrorKind", "AuthenticationException", "ErrorInformation", "wrap_fault"]
