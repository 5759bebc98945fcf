from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from graph_auth.errors import AuthenticationException, AuthErrorKind
from graph_auth.models import MeResult, ProviderType
from graph_auth.providers import FacebookProvider
from graph_auth.rest import RestRequest, RestResponse

CSRF_MESSAGE = "The states do not match. It's possible that you may be a victim of a CSRF."


class StubRestClient:
    def __init__(
        self,
        *,
        token: RestResponse[Any] | None = None,
        me: RestResponse[MeResult] | None = None,
        token_error: Exception | None = None,
        me_error: Exception | None = None,
    ) -> None:
        self.token = token
        self.me = me
        self.token_error = token_error
        self.me_error = me_error
        self.requests: list[RestRequest] = []

    def execute(self, request: RestRequest) -> RestResponse[Any]:
        self.requests.append(request)
        if self.token_error is not None:
            raise self.token_error
        assert self.token is not None
        return self.token

    def execute_as(self, request: RestRequest, model: type[MeResult]) -> RestResponse[MeResult]:
        self.requests.append(request)
        if self.me_error is not None:
            raise self.me_error
        assert self.me is not None
        return self.me


def _token_ok(content: str = "access_token=foo&expires_on=1000") -> RestResponse[Any]:
    return RestResponse(status_code=200, status_description="OK", content=content)


def _me_ok() -> RestResponse[MeResult]:
    me = MeResult(
        id=1,
        first_name="some firstname",
        last_name="some lastname",
        link="http://whatever",
        locale="en-au",
        name="Hi there",
        timezone=10,
        username="PewPew",
        verified=True,
    )
    return RestResponse(status_code=200, status_description="OK", data=me)


def _provider(client: StubRestClient) -> FacebookProvider:
    return FacebookProvider("a", "b", "http://www.google.com", client)  # type: ignore[arg-type]


def test_unrelated_parameters_return_none() -> None:
    client = StubRestClient()
    result = _provider(client).authenticate_client({"aaa": "aaa"}, "meh")
    assert result is None
    assert client.requests == []


def test_state_mismatch_reports_csrf_without_http_calls() -> None:
    client = StubRestClient()
    result = _provider(client).authenticate_client({"Code": "aaa", "State": "bbb"}, "meh")

    assert result is not None
    assert result.provider_type == ProviderType.FACEBOOK
    assert result.error_information is not None
    assert result.error_information.message == CSRF_MESSAGE
    assert result.error_information.kind == AuthErrorKind.STATE_MISMATCH
    assert client.requests == []


def test_state_comparison_is_case_sensitive() -> None:
    client = StubRestClient()
    result = _provider(client).authenticate_client({"code": "aaa", "state": "BBB"}, "bbb")
    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == CSRF_MESSAGE


@pytest.mark.parametrize("with_code", [False, True])
def test_provider_error_parameters_are_reported(with_code: bool) -> None:
    params = {"error_reason": "aaa", "error": "bbb", "error_description": "ccc"}
    if with_code:
        params["code"] = "zzz"
    client = StubRestClient()
    result = _provider(client).authenticate_client(params, "meh")

    assert result is not None
    assert result.provider_type == ProviderType.FACEBOOK
    assert result.error_information is not None
    assert result.error_information.message == "Reason: aaa. Error: bbb. Description: ccc."
    assert result.error_information.kind == AuthErrorKind.PROVIDER_ERROR
    assert client.requests == []


def test_partial_provider_error_parameters_interpolate_blanks() -> None:
    result = _provider(StubRestClient()).authenticate_client({"error": "access_denied"}, "meh")
    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == "Reason: . Error: access_denied. Description: ."


def test_token_request_exception_is_wrapped() -> None:
    cause = RuntimeError("Some mock exception.")
    client = StubRestClient(token_error=cause)
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == "Failed to retrieve an oauth access token from Facebook."
    assert isinstance(result.error_information.exception, AuthenticationException)
    assert result.error_information.exception.__cause__ is cause


def test_token_request_unauthorized_status() -> None:
    client = StubRestClient(token=RestResponse(status_code=401, status_description="Unauthorised"))
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == (
        "Failed to obtain an Access Token from Facebook OR the the response was not an HTTP Status 200 OK. "
        "Response Status: Unauthorized. Response Description: Unauthorised"
    )
    assert isinstance(result.error_information.exception, AuthenticationException)
    assert result.error_information.kind == AuthErrorKind.TOKEN_STATUS


@pytest.mark.parametrize(
    "content",
    [
        "access_token=foo&omg=pewpew",
        "expires_on=1000",
        "access_token=foo&expires_on=soon",
        "",
    ],
)
def test_incomplete_token_response(content: str) -> None:
    client = StubRestClient(token=_token_ok(content))
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == (
        "Retrieved a Facebook Access Token but it doesn't contain both the access_token and expires_on parameters."
    )
    assert isinstance(result.error_information.exception, AuthenticationException)
    assert len(client.requests) == 1


def test_me_request_exception_is_wrapped() -> None:
    client = StubRestClient(token=_token_ok(), me_error=RuntimeError("Some mock exception message."))
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == "Failed to retrieve any Me data from the Facebook Api."
    assert isinstance(result.error_information.exception, AuthenticationException)
    assert result.user_information is None
    assert result.access_token is not None


def test_me_request_unauthorized_status() -> None:
    client = StubRestClient(
        token=_token_ok(),
        me=RestResponse(status_code=401, status_description="Unauthorized"),
    )
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message == (
        "Failed to obtain some Me data from the Facebook api OR the the response was not an HTTP Status 200 OK. "
        "Response Status: Unauthorized. Response Description: Unauthorized"
    )
    assert result.error_information.kind == AuthErrorKind.PROFILE_STATUS


def test_me_response_without_data_is_an_error() -> None:
    client = StubRestClient(token=_token_ok(), me=RestResponse(status_code=200, status_description="OK"))
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.kind == AuthErrorKind.PROFILE_STATUS
    assert "Response Status: OK" in result.error_information.message


def test_valid_credentials_return_user_information() -> None:
    client = StubRestClient(token=_token_ok(), me=_me_ok())
    result = _provider(client).authenticate_client({"code": "aaa", "state": "bbb"}, "bbb")

    assert result is not None
    assert result.provider_type == ProviderType.FACEBOOK
    assert result.error_information is None
    assert result.is_authenticated
    assert result.access_token is not None
    assert result.access_token.public_token == "foo"
    assert result.user_information is not None
    assert result.user_information.id > 0
    assert result.user_information.name == "Hi there"
    assert result.user_information.user_name == "PewPew"

    token_request, me_request = client.requests
    assert token_request.params == {
        "client_id": "a",
        "client_secret": "b",
        "redirect_uri": "http://www.google.com",
        "code": "aaa",
    }
    assert me_request.params["access_token"] == "foo"


def test_missing_state_skips_csrf_check() -> None:
    client = StubRestClient(token=_token_ok("access_token=foo&expires=3600"), me=_me_ok())
    result = _provider(client).authenticate_client({"code": "aaa"}, "bbb")
    assert result is not None
    assert result.error_information is None


def test_json_token_body_is_accepted() -> None:
    client = StubRestClient(
        token=_token_ok('{"access_token": "foo", "token_type": "bearer", "expires_in": 5183944}'),
        me=_me_ok(),
    )
    result = _provider(client).authenticate_client({"code": "aaa"}, None)
    assert result is not None
    assert result.access_token is not None
    assert result.access_token.public_token == "foo"


def test_result_is_frozen() -> None:
    client = StubRestClient(token=_token_ok(), me=_me_ok())
    result = _provider(client).authenticate_client({"code": "aaa"}, None)
    assert result is not None
    with pytest.raises(ValidationError):
        result.error_information = None  # type: ignore[misc]


@pytest.mark.parametrize(
    "content",
    ["access_token=foo&expires_on=1700000000000", "access_token=foo&expires=-1000000000000000"],
)
def test_out_of_range_expiry_is_reported_as_malformed(content: str) -> None:
    client = StubRestClient(token=_token_ok(content))
    result = _provider(client).authenticate_client({"code": "aaa"}, None)

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.kind == AuthErrorKind.TOKEN_MALFORMED
    assert result.error_information.message == (
        "Retrieved a Facebook Access Token but it doesn't contain both the access_token and expires_on parameters."
    )
    assert result.error_information.exception is not None
    assert isinstance(result.error_information.exception.__cause__, OverflowError)
    assert len(client.requests) == 1


def test_token_request_bad_request_uses_status_name() -> None:
    client = StubRestClient(token=RestResponse(status_code=400, status_description="Bad Request"))
    result = _provider(client).authenticate_client({"code": "aaa"}, None)

    assert result is not None
    assert result.error_information is not None
    assert result.error_information.message.endswith(
        "Response Status: BadRequest. Response Description: Bad Request"
    )


@pytest.mark.parametrize(
    ("status", "name"),
    [(200, "OK"), (404, "NotFound"), (500, "InternalServerError"), (599, "599")],
)
def test_status_name_is_a_single_word(status: int, name: str) -> None:
    assert RestResponse(status_code=status).status_name == name


def test_close_leaves_injected_client_alone() -> None:
    client = StubRestClient()
    with _provider(client) as provider:
        assert provider.authenticate_client({"aaa": "aaa"}, None) is None
    assert client.requests == []
