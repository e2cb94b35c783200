from typing import Annotated, cast

from fastapi import Depends, Header, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from medvault.app import App
from medvault.core.modules.session.models import AuthToken
from medvault.core.modules.vault_session.models import VaultSessionRef
from medvault.errors import AuthenticationError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name="auth_token", auto_error=False)

VAULT_SESSION_HEADER = "X-Vault-Session"


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> AuthToken:
    """Get and validate auth token from Authorization Bearer header or cookie."""

    # Check Bearer token first (preferred)
    if credentials and credentials.scheme == "Bearer":
        auth_token = AuthToken(credentials.credentials)
        if await app.is_auth_token_valid(auth_token):
            return auth_token

    if token_cookie:
        auth_token = AuthToken(token_cookie)
        if await app.is_auth_token_valid(auth_token):
            return auth_token

    raise AuthenticationError


async def get_vault_session_ref(
    x_vault_session: Annotated[str | None, Header(alias=VAULT_SESSION_HEADER)] = None,
) -> VaultSessionRef | None:
    """Vault session reference sent with document calls; validity is checked by the access gate."""
    if not x_vault_session:
        return None
    return VaultSessionRef(x_vault_session)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken, Depends(get_auth_token)]
VaultSessionDep = Annotated[VaultSessionRef | None, Depends(get_vault_session_ref)]
