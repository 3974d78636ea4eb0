"""Pydantic schemas for token and password recovery endpoints."""

from pydantic import BaseModel


class TokenRequest(BaseModel):
    username: str
    password: str


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str


class AccessTokenResponse(BaseModel):
    access_token: str


class RecoveryRequest(BaseModel):
    username: str


class ExchangeCodeRequest(BaseModel):
    username: str
    code: str


class ResettingCodeResponse(BaseModel):
    resetting_code: str


class ResetPasswordRequest(BaseModel):
    username: str
    code: str
    new_password: str
