"""Pydantic schemas for user endpoints."""

from pydantic import BaseModel


class CreateUserRequest(BaseModel):
    username: str
    password: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    invite_code: str | None = None


class UpdateUserRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None


class UserIdResponse(BaseModel):
    id: int


class UserInfoResponse(BaseModel):
    id: int
    username: str | None
    first_name: str | None
    last_name: str | None
    email: str | None

    model_config = {"from_attributes": True}


class InviteRequest(BaseModel):
    email: str
