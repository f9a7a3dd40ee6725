import enum
from http import HTTPStatus


class ErrorCode(enum.Enum):
    """An HTTP status paired with the fixed message clients receive."""

    def __init__(self, status: HTTPStatus, message: str):
        self.status = status
        self.message = message


class AccountCode(ErrorCode):
    INVALID_EXPIRED_TOKEN = (HTTPStatus.UNAUTHORIZED, "Expired or invalid JWT token.")
    AUTHENTICATION_REQUIRED = (
        HTTPStatus.UNAUTHORIZED,
        "Full authentication is required to access this resource.",
    )


class WebhookCode(ErrorCode):
    DESERIALIZATION_ERROR = (HTTPStatus.BAD_REQUEST, "Unable to deserialize stripe event.")
    SIGNATURE_VERIFICATION_ERROR = (
        HTTPStatus.BAD_REQUEST,
        "Stripe signature verification failed.",
    )
    OBJECT_MISSING_ERROR = (HTTPStatus.BAD_REQUEST, "Stripe event data object is missing.")
    BILLING_UNAVAILABLE = (HTTPStatus.SERVICE_UNAVAILABLE, "Billing is not configured.")


class RequestCode(ErrorCode):
    PAYLOAD_TOO_LARGE = (HTTPStatus.REQUEST_ENTITY_TOO_LARGE, "Payload too large.")
    VALIDATION_ERRORS = (HTTPStatus.BAD_REQUEST, "Validation errors")


class ApiException(Exception):
    code: ErrorCode

    def __init__(self, code: ErrorCode):
        super().__init__(code.message)
        self.code = code

    @property
    def status(self) -> HTTPStatus:
        return self.code.status


class InvalidOrExpiredTokenError(ApiException):
    def __init__(self):
        super().__init__(AccountCode.INVALID_EXPIRED_TOKEN)


class AuthenticationRequiredError(ApiException):
    def __init__(self):
        super().__init__(AccountCode.AUTHENTICATION_REQUIRED)


class DeserializationError(ApiException):
    def __init__(self):
        super().__init__(WebhookCode.DESERIALIZATION_ERROR)


class SignatureVerificationError(ApiException):
    def __init__(self):
        super().__init__(WebhookCode.SIGNATURE_VERIFICATION_ERROR)


class ObjectMissingError(ApiException):
    def __init__(self):
        super().__init__(WebhookCode.OBJECT_MISSING_ERROR)


class BillingUnavailableError(ApiException):
    def __init__(self):
        super().__init__(WebhookCode.BILLING_UNAVAILABLE)
