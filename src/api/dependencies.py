# src/api/dependencies.py
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.errors import Unauthorized

TOKEN_REQUIRED_REASON = (
    "GitHub requires an access token with the proper scopes to use the GraphQL API: "
    "https://developer.github.com/v4/guides/forming-calls/#authenticating-with-graphql. "
    "Add the token to the 'Authorization' header as a bearer token"
)

# auto_error=False: a missing header must be a 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def optional_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


async def require_bearer_token(
    token: Optional[str] = Depends(optional_bearer_token),
) -> str:
    if token is None:
        raise Unauthorized(TOKEN_REQUIRED_REASON)
    return token
