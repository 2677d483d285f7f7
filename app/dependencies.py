"""Shared FastAPI dependencies: token service and the authentication gate."""
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from app.config import Settings
from app.errors import AuthError, AuthKind
from app.utils.auth import IdentityClaim, TokenService


def get_token_service(request: Request) -> TokenService:
    """Dependency to get the TokenService created at startup from app.state"""
    return request.app.state.token_service


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthError: MISSING_TOKEN if there is no header, MALFORMED_HEADER
            if it is not exactly two parts starting with ``Bearer``
    """
    if not authorization:
        raise AuthError(AuthKind.MISSING_TOKEN)

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthError(AuthKind.MALFORMED_HEADER)

    return parts[1]


async def get_current_identity(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
    tokens: TokenService = Depends(get_token_service),
) -> IdentityClaim:
    """
    Authentication gate for protected routes.

    Verifies the bearer token and attaches the resolved identity to
    ``request.state.identity``. Any failure ends the request with a 401
    before the route handler runs.
    """
    token = extract_bearer_token(authorization)
    identity = tokens.verify(token)
    request.state.identity = identity
    return identity


# Type aliases for route signatures
CurrentIdentity = Annotated[IdentityClaim, Depends(get_current_identity)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def get_settings(request: Request) -> Settings:
    """Dependency to get the settings the application was built with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]
