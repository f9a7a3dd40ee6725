from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from meco.core.errors import RequestCode
from meco.schemas.errors import ApiError


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body exceeds ``max_bytes``."""

    def __init__(self, app, max_bytes: int = 1_048_576):  # 1 MiB
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.max_bytes:
                code = RequestCode.PAYLOAD_TOO_LARGE
                return ApiError.from_code(code).to_response(code.status.value)
        return await call_next(request)
