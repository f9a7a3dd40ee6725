"""Per-request security context.

The authentication gate stores one ``SecurityContext`` on each request's
state. Nothing here is process-global: every request starts with an empty
context and it is dropped with the request.
"""
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request

from meco.core.errors import AuthenticationRequiredError

STATE_KEY = "security_context"


@dataclass(frozen=True)
class Principal:
    subject: str
    authorities: tuple[str, ...] = ()

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


@dataclass
class SecurityContext:
    principal: Optional[Principal] = field(default=None)

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    def authenticate(self, principal: Principal) -> None:
        self.principal = principal

    def clear(self) -> None:
        self.principal = None


def get_security_context(request: Request) -> SecurityContext:
    context = getattr(request.state, STATE_KEY, None)
    if context is None:
        # gate not installed for this route: treat as anonymous
        context = SecurityContext()
    return context


def current_principal(
    context: SecurityContext = Depends(get_security_context),
) -> Principal:
    if context.principal is None:
        raise AuthenticationRequiredError()
    return context.principal
