"""User API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from warden.dependencies import Services, get_bearer_token, get_services
from warden.schemas.user import (
    CreateUserRequest,
    InviteRequest,
    UpdateUserRequest,
    UserIdResponse,
    UserInfoResponse,
)
from warden.services.auth import Registration, UserUpdate

router = APIRouter(prefix="/api/v1", tags=["Users"])


@router.post("/users", response_model=UserIdResponse)
def create_user(body: CreateUserRequest, services: Services = Depends(get_services)) -> UserIdResponse:
    """Register a new user account."""
    user_id = services.auth.create_user(Registration(**body.model_dump()))
    return UserIdResponse(id=user_id)


@router.get("/users", response_model=list[UserInfoResponse])
def list_users(
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> list[UserInfoResponse]:
    """List all registered users."""
    return [UserInfoResponse.model_validate(u) for u in services.auth.get_users(token)]


@router.get("/users/me", response_model=UserInfoResponse)
def current_user(
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> UserInfoResponse:
    """Return the user the access token belongs to."""
    return UserInfoResponse.model_validate(services.auth.get_user_by_token(token))


@router.post("/users/invite", response_model=UserIdResponse)
def invite_user(
    body: InviteRequest,
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> UserIdResponse:
    """Send an invite code to an email address. Admin only."""
    return UserIdResponse(id=services.invitations.invite_user(body.email, token))


@router.patch("/users/{user_id}")
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> dict:
    """Update first name, last name or email of the current user."""
    services.auth.update_user(user_id, UserUpdate(**body.model_dump()), token)
    return {"detail": "User updated"}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> dict:
    """Delete a user. The user itself or the admin only."""
    services.auth.delete_user(user_id, token)
    return {"detail": "User deleted"}


@router.get("/userinfo/byid/{user_id}", response_model=UserInfoResponse)
def user_info_by_id(user_id: int, services: Services = Depends(get_services)) -> UserInfoResponse:
    """Public profile by id."""
    info = services.auth.get_user_by_id(user_id)
    if not info:
        raise HTTPException(status_code=404, detail="User is missing")
    return UserInfoResponse.model_validate(info)


@router.get("/userinfo/byusername/{username}", response_model=UserInfoResponse)
def user_info_by_username(username: str, services: Services = Depends(get_services)) -> UserInfoResponse:
    """Public profile by username."""
    info = services.auth.get_user_by_username(username)
    if not info:
        raise HTTPException(status_code=404, detail="User is missing")
    return UserInfoResponse.model_validate(info)
