"""Facebook authorization-code flow: token exchange followed by a ``me`` lookup."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Sequence

import httpx

from ..config import GraphAuthSettings
from ..errors import AuthErrorKind, ErrorInformation, wrap_fault
from ..logging import get_logger
from ..models import AccessToken, AuthenticatedClient, MeResult, ProviderType, UserInformation
from ..rest import HttpxRestClient, RestClient, RestRequest, RestResponse
from .base import AuthenticationProvider, normalize_parameters

logger = get_logger(__name__)

DEFAULT_GRAPH_API_BASE_URL = "https://graph.facebook.com"
DEFAULT_OAUTH_BASE_URL = "https://www.facebook.com"
DEFAULT_GRAPH_API_VERSION = "v18.0"
DEFAULT_SCOPES = ("email",)
DEFAULT_ME_FIELDS = (
    "id",
    "name",
    "username",
    "first_name",
    "last_name",
    "link",
    "locale",
    "timezone",
    "verified",
)

ERROR_KEYS = ("error", "error_reason", "error_description")
EXPIRY_KEYS = ("expires_on", "expires_in", "expires")

STATE_MISMATCH_MESSAGE = "The states do not match. It's possible that you may be a victim of a CSRF."
TOKEN_TRANSPORT_MESSAGE = "Failed to retrieve an oauth access token from Facebook."
TOKEN_STATUS_MESSAGE = (
    "Failed to obtain an Access Token from Facebook OR the the response was not an HTTP Status 200 OK. "
    "Response Status: {status}. Response Description: {description}"
)
TOKEN_MALFORMED_MESSAGE = (
    "Retrieved a Facebook Access Token but it doesn't contain both the access_token and expires_on parameters."
)
PROFILE_TRANSPORT_MESSAGE = "Failed to retrieve any Me data from the Facebook Api."
PROFILE_STATUS_MESSAGE = (
    "Failed to obtain some Me data from the Facebook api OR the the response was not an HTTP Status 200 OK. "
    "Response Status: {status}. Response Description: {description}"
)


def provider_error_message(parameters: Mapping[str, str]) -> str:
    return "Reason: {reason}. Error: {error}. Description: {description}.".format(
        reason=parameters.get("error_reason", ""),
        error=parameters.get("error", ""),
        description=parameters.get("error_description", ""),
    )


def parse_token_content(content: str) -> dict[str, str]:
    """Read a token response body.

    Older Graph versions answer with a query string
    (``access_token=...&expires=...``); newer ones with a JSON object.
    """

    body = content.strip()
    if body.startswith("{"):
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(key): str(value) for key, value in payload.items() if value is not None}
    return dict(httpx.QueryParams(body))


class FacebookProvider(AuthenticationProvider):
    """Authenticates Facebook users from the OAuth redirect callback."""

    provider_type = ProviderType.FACEBOOK

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        rest_client: RestClient | None = None,
        *,
        graph_api_version: str = DEFAULT_GRAPH_API_VERSION,
        oauth_base_url: str = DEFAULT_OAUTH_BASE_URL,
        scopes: Sequence[str] = DEFAULT_SCOPES,
        me_fields: Sequence[str] = DEFAULT_ME_FIELDS,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        # Only a client built here is closed by ``close``; injected clients belong to the caller.
        self._owned_client: HttpxRestClient | None = None
        if rest_client is None:
            rest_client = self._owned_client = HttpxRestClient(base_url=DEFAULT_GRAPH_API_BASE_URL)
        self._rest_client = rest_client
        self._graph_api_version = graph_api_version
        self._oauth_base_url = oauth_base_url.rstrip("/")
        self._scopes = list(scopes)
        self._me_fields = list(me_fields)

    @classmethod
    def from_settings(
        cls,
        settings: GraphAuthSettings,
        rest_client: RestClient | None = None,
    ) -> "FacebookProvider":
        owned_client = HttpxRestClient.from_settings(settings) if rest_client is None else None
        provider = cls(
            settings.app_id,
            settings.app_secret.get_secret_value(),
            settings.oauth_redirect_uri,
            rest_client or owned_client,
            graph_api_version=settings.graph_api_version,
            oauth_base_url=settings.facebook_oauth_base_url,
            scopes=settings.default_scopes,
        )
        provider._owned_client = owned_client
        return provider

    def close(self) -> None:
        if self._owned_client is not None:
            self._owned_client.close()
            self._owned_client = None

    def __enter__(self) -> "FacebookProvider":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def redirect_to_authenticate(self, state: str, *, scopes: Sequence[str] | None = None) -> str:
        scope_value = ",".join(sorted(set(scopes if scopes is not None else self._scopes)))
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "state": state,
            "scope": scope_value,
            "response_type": "code",
        }
        url = httpx.URL(f"{self._oauth_base_url}/{self._graph_api_version}/dialog/oauth")
        return str(url.copy_with(params=params))

    def authenticate_client(
        self,
        parameters: Mapping[str, str],
        expected_state: str | None,
    ) -> AuthenticatedClient | None:
        params = normalize_parameters(parameters)
        has_error = any(key in params for key in ERROR_KEYS)
        if "code" not in params and not has_error:
            return None

        if has_error:
            return self._failed(
                ErrorInformation(message=provider_error_message(params), kind=AuthErrorKind.PROVIDER_ERROR)
            )

        state = params.get("state")
        if state is not None and state != expected_state:
            logger.warning("oauth_state_mismatch", provider=self.provider_type.value)
            return self._failed(ErrorInformation(message=STATE_MISMATCH_MESSAGE, kind=AuthErrorKind.STATE_MISMATCH))

        token = self._retrieve_access_token(params["code"])
        if isinstance(token, ErrorInformation):
            return self._failed(token)

        user = self._retrieve_me(token)
        if isinstance(user, ErrorInformation):
            return self._failed(user, access_token=token)

        logger.info("authentication_succeeded", provider=self.provider_type.value, user_id=user.id)
        return AuthenticatedClient(
            provider_type=self.provider_type,
            access_token=token,
            user_information=user,
        )

    def _retrieve_access_token(self, code: str) -> AccessToken | ErrorInformation:
        request = RestRequest(
            resource=f"/{self._graph_api_version}/oauth/access_token",
            params={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": self._redirect_uri,
                "code": code,
            },
        )
        try:
            response = self._rest_client.execute(request)
        except Exception as exc:  # noqa: BLE001 - client faults are returned as error information
            logger.warning("token_exchange_failed", error=str(exc), error_type=type(exc).__name__)
            return ErrorInformation(
                message=TOKEN_TRANSPORT_MESSAGE,
                kind=AuthErrorKind.TOKEN_TRANSPORT,
                exception=wrap_fault(TOKEN_TRANSPORT_MESSAGE, exc),
            )

        if not response.is_ok:
            return self._status_error(response, TOKEN_STATUS_MESSAGE, AuthErrorKind.TOKEN_STATUS)

        values = parse_token_content(response.content)
        public_token = values.get("access_token")
        expires = next((values[key] for key in EXPIRY_KEYS if key in values), None)
        cause: Exception | None = None
        if public_token and expires is not None:
            try:
                return AccessToken(
                    public_token=public_token,
                    expires_on=datetime.now(timezone.utc) + timedelta(seconds=int(expires)),
                )
            except (ValueError, OverflowError) as exc:
                cause = exc

        logger.warning("token_response_incomplete", keys=sorted(values), expires=expires)
        return ErrorInformation(
            message=TOKEN_MALFORMED_MESSAGE,
            kind=AuthErrorKind.TOKEN_MALFORMED,
            exception=wrap_fault(TOKEN_MALFORMED_MESSAGE, cause),
        )

    def _retrieve_me(self, token: AccessToken) -> UserInformation | ErrorInformation:
        request = RestRequest(
            resource=f"/{self._graph_api_version}/me",
            params={
                "access_token": token.public_token,
                "fields": ",".join(self._me_fields),
            },
        )
        try:
            response = self._rest_client.execute_as(request, MeResult)
        except Exception as exc:  # noqa: BLE001 - client faults are returned as error information
            logger.warning("me_request_failed", error=str(exc), error_type=type(exc).__name__)
            return ErrorInformation(
                message=PROFILE_TRANSPORT_MESSAGE,
                kind=AuthErrorKind.PROFILE_TRANSPORT,
                exception=wrap_fault(PROFILE_TRANSPORT_MESSAGE, exc),
            )

        if not response.is_ok or response.data is None:
            return self._status_error(response, PROFILE_STATUS_MESSAGE, AuthErrorKind.PROFILE_STATUS)

        return UserInformation.from_me(response.data)

    def _status_error(self, response: RestResponse, template: str, kind: AuthErrorKind) -> ErrorInformation:
        logger.warning(
            "provider_response_rejected",
            kind=kind.value,
            status=response.status_code,
            description=response.status_description,
        )
        message = template.format(status=response.status_name, description=response.status_description)
        return ErrorInformation(
            message=message,
            kind=kind,
            exception=wrap_fault(message, response.error_exception),
        )

    def _failed(self, error: ErrorInformation, *, access_token: AccessToken | None = None) -> AuthenticatedClient:
        logger.info("authentication_failed", provider=self.provider_type.value, kind=error.kind.value)
        return AuthenticatedClient(
            provider_type=self.provider_type,
            access_token=access_token,
            error_information=error,
        )


__all__ = ["FacebookProvider", "parse_token_content", "provider_error_message"]
