import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any, Iterable, Optional, Protocol

from jose import JWTError, jwt
from starlette.requests import HTTPConnection

from meco.core.config import Settings
from meco.core.errors import InvalidOrExpiredTokenError
from meco.security.context import Principal

logger = logging.getLogger(__name__)

AUTHORITIES_CLAIM = "auth"
BEARER_SCHEME = "bearer"


class RevocationCheck(Protocol):
    """Decides whether an otherwise valid token has been revoked."""

    def is_revoked(self, claims: dict[str, Any]) -> bool:
        ...


class JwtTokenProvider:
    """Issues and validates the bearer tokens handed to account holders."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        validity_minutes: int = 60,
        revocation: Optional[RevocationCheck] = None,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.validity = timedelta(minutes=validity_minutes)
        self.revocation = revocation

    @classmethod
    def from_settings(
        cls, settings: Settings, revocation: Optional[RevocationCheck] = None
    ) -> "JwtTokenProvider":
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            validity_minutes=settings.jwt_validity_minutes,
            revocation=revocation,
        )

    def create_token(self, subject: str, authorities: Iterable[str] = ()) -> str:
        now = datetime.now(UTC)
        claims = {
            "sub": subject,
            AUTHORITIES_CLAIM: list(authorities),
            "iat": now,
            "exp": now + self.validity,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def resolve_token(self, request: HTTPConnection) -> Optional[str]:
        """Return the bearer token from the Authorization header, if any."""
        header = request.headers.get("authorization")
        if not header:
            return None
        scheme, _, token = header.partition(" ")
        if scheme.lower() != BEARER_SCHEME:
            return None
        return token.strip() or None

    def validate_token(self, token: str) -> dict[str, Any]:
        """Return the verified claims.

        Raises InvalidOrExpiredTokenError unless the token is usable. The
        claims can be handed back to ``get_authentication`` so the token is
        decoded and checked for revocation only once per request.
        """
        return self._decode(token)

    def get_authentication(
        self, token: str, claims: Optional[dict[str, Any]] = None
    ) -> Principal:
        if claims is None:
            claims = self._decode(token)
        return Principal(subject=claims["sub"], authorities=_authorities(claims))

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as exc:
            raise InvalidOrExpiredTokenError() from exc

        if self.revocation is not None and self.revocation.is_revoked(claims):
            logger.info(f"Rejected revoked token jti={claims.get('jti')}")
            raise InvalidOrExpiredTokenError()
        _authorities(claims)
        return claims


def _authorities(claims: dict[str, Any]) -> tuple[str, ...]:
    value = claims.get(AUTHORITIES_CLAIM)
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(a, str) for a in value):
        return tuple(value)
    logger.info(f"Rejected token with malformed {AUTHORITIES_CLAIM} claim")
    raise InvalidOrExpiredTokenError()
