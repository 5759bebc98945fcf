"""Provider interface shared by OAuth callback handlers."""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from typing import Mapping

from ..models import AuthenticatedClient, ProviderType


def generate_state(length: int = 32) -> str:
    """Generate a URL-safe state token."""

    return secrets.token_urlsafe(length)


def normalize_parameters(parameters: Mapping[str, str]) -> dict[str, str]:
    """Lower-case callback parameter names; the first occurrence of a name wins."""

    normalized: dict[str, str] = {}
    for key, value in parameters.items():
        normalized.setdefault(key.lower(), value)
    return normalized


class AuthenticationProvider(ABC):
    """An OAuth2 identity provider able to complete an authorization-code callback."""

    provider_type: ProviderType

    @abstractmethod
    def redirect_to_authenticate(self, state: str) -> str:
        """Return the provider URL the user is sent to in order to log in."""

    @abstractmethod
    def authenticate_client(
        self,
        parameters: Mapping[str, str],
        expected_state: str | None,
    ) -> AuthenticatedClient | None:
        """Complete a callback.

        Returns ``None`` when ``parameters`` are not a callback for this
        provider. Every failure is reported through
        ``AuthenticatedClient.error_information``; nothing is raised.
        """


__all__ = ["AuthenticationProvider", "generate_state", "normalize_parameters"]
