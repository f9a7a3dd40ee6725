import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from meco.billing.service import BillingService
from meco.core.config import Settings, get_settings
from meco.core.errors import ApiException, BillingUnavailableError, RequestCode
from meco.middleware.body_size import BodySizeLimitMiddleware
from meco.schemas.account import AccountOut
from meco.schemas.errors import ApiError, ApiSubError
from meco.security.context import Principal, current_principal
from meco.security.gate import AuthenticationGateMiddleware, TokenProvider
from meco.security.jwt_provider import JwtTokenProvider
from meco.webhook.service import WebhookService

VERSION = "1.0.0"

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------- errors ----------
async def api_exception_handler(request: Request, exc: ApiException):
    logger.warning(
        f"{exc.code.status.name} {request.method} {request.url.path}: {exc.code.message}"
    )
    return ApiError.from_code(exc.code).to_response(exc.status.value)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    sub_errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())]
        sub_errors.append(
            ApiSubError(
                object=location[0] if location else "request",
                field=".".join(location[1:]) or None,
                rejected_value=error.get("input"),
                message=error.get("msg", ""),
            )
        )
    code = RequestCode.VALIDATION_ERRORS
    return ApiError.from_code(code, sub_errors).to_response(code.status.value)


# ---------- dependencies ----------
def get_webhook_service(request: Request) -> WebhookService:
    service: Optional[WebhookService] = getattr(
        request.app.state, "webhook_service", None
    )
    if service is None:
        raise BillingUnavailableError()
    return service


# ---------- health ----------
@router.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok", "version": VERSION}


# ---------- accounts ----------
@router.get("/accounts/me", response_model=AccountOut)
def who_am_i(principal: Principal = Depends(current_principal)):
    return AccountOut(username=principal.subject, authorities=list(principal.authorities))


# ---------- stripe ----------
@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(..., alias="Stripe-Signature"),
    service: WebhookService = Depends(get_webhook_service),
):
    payload = await request.body()
    # billing collaborators may block on network or database I/O
    await run_in_threadpool(service.handle_stripe_event, payload, stripe_signature)
    return {"status": "received"}


def create_app(
    settings: Optional[Settings] = None,
    billing_service: Optional[BillingService] = None,
    token_provider: Optional[TokenProvider] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="meco",
        description="API key management with Stripe billing",
        version=VERSION,
    )
    app.state.token_provider = token_provider or JwtTokenProvider.from_settings(settings)
    app.state.webhook_service = None
    if billing_service is not None:
        app.state.webhook_service = WebhookService.from_settings(billing_service, settings)
    else:
        logger.warning("No billing service configured; Stripe webhooks will be rejected")

    app.add_exception_handler(ApiException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # last added runs first: CORS, body size, then the authentication gate
    app.add_middleware(AuthenticationGateMiddleware, provider=app.state.token_provider)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    app.include_router(router)
    return app


app = create_app()
