"""Route-to-authority policy, enforced before any route handler runs."""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from fastapi import Request, status
from fastapi.responses import JSONResponse

from .security import Principal, principal_from_token

logger = logging.getLogger(__name__)

PUBLIC = "public"
AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AccessRule:
    pattern: str
    # PUBLIC, AUTHENTICATED, or a tuple of accepted authorities
    requirement: Union[str, Tuple[str, ...]]

    def matches(self, path: str) -> bool:
        if self.pattern.endswith("/**"):
            prefix = self.pattern[:-3]
            return path == prefix or path.startswith(prefix + "/")
        return path == self.pattern


# First match wins
ACCESS_RULES: Tuple[AccessRule, ...] = (
    AccessRule("/auth/**", PUBLIC),
    AccessRule("/docs/**", PUBLIC),
    AccessRule("/redoc", PUBLIC),
    AccessRule("/openapi.json", PUBLIC),
    AccessRule("/api/v1/users/**", ("ROLE_ADMIN",)),
    AccessRule("/api/v1/tasks/**", ("ROLE_USER", "ROLE_ADMIN")),
)
DEFAULT_RULE = AccessRule("/**", AUTHENTICATED)


def rule_for(path: str) -> AccessRule:
    for rule in ACCESS_RULES:
        if rule.matches(path):
            return rule
    return DEFAULT_RULE


def is_allowed(rule: AccessRule, principal: Optional[Principal]) -> bool:
    if rule.requirement == PUBLIC:
        return True
    if principal is None:
        return False
    if rule.requirement == AUTHENTICATED:
        return True
    return principal.has_any_authority(*rule.requirement)


def get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return None


async def enforce_access_policy(request: Request, call_next):
    """HTTP middleware: authenticate the bearer token and apply ACCESS_RULES.

    Stateless: the principal is rebuilt from the token on every request and
    left on ``request.state.principal`` for the handlers.
    """
    path = request.url.path
    rule = rule_for(path)
    token = get_token_from_request(request)
    principal = principal_from_token(token) if token else None
    request.state.principal = principal

    if is_allowed(rule, principal):
        return await call_next(request)

    if principal is None:
        logger.info("Unauthenticated request to %s %s", request.method, path)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.warning("Access denied for %s to %s %s", principal.username, request.method, path)
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Not enough permissions"},
    )

