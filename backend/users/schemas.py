# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the user endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from models.user import UserRole


# -- Requests --------------------------------------------------------------
# extra="forbid": a body carrying access_token (or anything unknown) is a 422


class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.USER

    model_config = {"extra": "forbid"}


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[UserRole] = None

    model_config = {"extra": "forbid"}


# -- Responses -------------------------------------------------------------
# Neither password_hash nor access_token appears in any response model.


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PaginatedUsersResponse(BaseModel):
    data: List[UserResponse]
    total: int
    page: int
    limit: int
    total_pages: int = Field(serialization_alias="totalPages")
    has_next_page: bool = Field(serialization_alias="hasNextPage")
    has_previous_page: bool = Field(serialization_alias="hasPreviousPage")

    model_config = {"from_attributes": True}
