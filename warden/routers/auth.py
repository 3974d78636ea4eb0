"""Token API endpoints."""

from fastapi import APIRouter, Depends

from warden.dependencies import Services, get_bearer_token, get_services
from warden.schemas.auth import AccessTokenResponse, TokenPairResponse, TokenRequest

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/token", response_model=TokenPairResponse)
def issue_token(body: TokenRequest, services: Services = Depends(get_services)) -> TokenPairResponse:
    """Authenticate with username and password and receive an access and a refresh token."""
    pair = services.tokens.issue(body.username, body.password)
    return TokenPairResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.post("/token/refresh", response_model=AccessTokenResponse)
def refresh_token(
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> AccessTokenResponse:
    """Exchange the refresh token in the Authorization header for a new access token."""
    return AccessTokenResponse(access_token=services.tokens.refresh(token))
