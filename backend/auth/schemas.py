# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from pydantic import BaseModel

from users.schemas import UserResponse


# -- Requests --------------------------------------------------------------


class LoginRequest(BaseModel):
    # Plain str: a malformed address simply fails as invalid credentials
    email: str
    password: str


# -- Responses -------------------------------------------------------------


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
