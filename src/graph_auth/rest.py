"""Minimal REST client seam used by providers, with an httpx implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Generic, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import GraphAuthSettings
from .logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(slots=True)
class RestRequest:
    resource: str
    method: str = "GET"
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class RestResponse(Generic[ModelT]):
    status_code: int
    status_description: str = ""
    content: str = ""
    data: ModelT | None = None
    error_exception: Exception | None = None

    @property
    def status_name(self) -> str:
        """Status as a single CamelCase word, e.g. ``BadRequest`` for 400."""

        try:
            phrase = HTTPStatus(self.status_code).phrase
        except ValueError:
            return str(self.status_code)
        return "".join(phrase.replace("-", " ").split())

    @property
    def is_ok(self) -> bool:
        return self.status_code == HTTPStatus.OK


class RestClient(Protocol):
    """Executes requests against a provider API.

    Implementations raise on transport failure and otherwise return the
    response whatever its status code.
    """

    def execute(self, request: RestRequest) -> RestResponse[Any]: ...

    def execute_as(self, request: RestRequest, model: type[ModelT]) -> RestResponse[ModelT]: ...


class HttpxRestClient:
    """``RestClient`` backed by a synchronous ``httpx.Client``."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 30.0,
        enable_request_logging: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._log_requests = enable_request_logging

    @classmethod
    def from_settings(cls, settings: GraphAuthSettings) -> "HttpxRestClient":
        return cls(
            base_url=settings.graph_api_base_url,
            timeout=settings.default_timeout_seconds,
            enable_request_logging=settings.enable_request_logging,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxRestClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def execute(self, request: RestRequest) -> RestResponse[Any]:
        resource = request.resource if request.resource.startswith("/") else f"/{request.resource}"
        params = {k: v for k, v in request.params.items() if v is not None}
        if self._log_requests:
            logger.info("rest_request", method=request.method, path=resource, params=params)

        response = self._client.request(method=request.method, url=resource, params=params)

        if self._log_requests:
            logger.info("rest_response", path=resource, status=response.status_code)
        return RestResponse(
            status_code=response.status_code,
            status_description=response.reason_phrase,
            content=response.text,
        )

    def execute_as(self, request: RestRequest, model: type[ModelT]) -> RestResponse[ModelT]:
        response: RestResponse[ModelT] = self.execute(request)
        if not 200 <= response.status_code < 300:
            return response
        try:
            response.data = model.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("rest_response_invalid", model=model.__name__, errors=exc.error_count())
            response.error_exception = exc
        return response


__all__ = ["HttpxRestClient", "RestClient", "RestRequest", "RestResponse"]
