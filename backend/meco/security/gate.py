"""Bearer-token authentication gate.

``authenticate`` is a plain function from a request to a ``GateResult``;
``AuthenticationGateMiddleware`` composes it into the ASGI stack and makes
sure it runs once per request.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import HTTPConnection, Request
from starlette.responses import Response

from meco.core.errors import AccountCode, InvalidOrExpiredTokenError
from meco.schemas.errors import ApiError
from meco.security.context import STATE_KEY, Principal, SecurityContext

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    def resolve_token(self, request: HTTPConnection) -> Optional[str]:
        ...

    def validate_token(self, token: str) -> Any:
        """Return a truthy value (the verified claims) or raise."""

    def get_authentication(self, token: str, claims: Any = None) -> Principal:
        ...


@dataclass
class GateResult:
    context: SecurityContext
    response: Optional[Response] = None

    @property
    def short_circuited(self) -> bool:
        return self.response is not None


def unauthorized_response() -> Response:
    code = AccountCode.INVALID_EXPIRED_TOKEN
    return ApiError.from_code(code).to_response(code.status.value)


def authenticate(request: HTTPConnection, provider: TokenProvider) -> GateResult:
    context = SecurityContext()
    token = provider.resolve_token(request)
    if token is None:
        return GateResult(context)

    try:
        claims = provider.validate_token(token)
        if claims:
            context.authenticate(provider.get_authentication(token, claims))
    except InvalidOrExpiredTokenError as exc:
        context.clear()
        logger.warning(f"{exc.code.status.name}: {exc.code.message} path={request.url.path}")
        return GateResult(context, unauthorized_response())
    return GateResult(context)


class AuthenticationGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, provider: TokenProvider):
        super().__init__(app)
        self.provider = provider

    async def dispatch(self, request: Request, call_next) -> Response:
        if getattr(request.state, STATE_KEY, None) is not None:
            return await call_next(request)

        result = authenticate(request, self.provider)
        setattr(request.state, STATE_KEY, result.context)
        if result.short_circuited:
            return result.response
        return await call_next(request)
