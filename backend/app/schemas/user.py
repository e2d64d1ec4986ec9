"""
RedSocial Backend — User Request/Response Schemas
===================================================

What:  Pydantic models for registration, login, profile reads and profile edits.

Security:
    No response model declares a password field, so the hash can never
    leak through serialization, whatever the ORM object carries.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """
    Body of POST /api/register and POST /auth/register.

    Password length is a business rule enforced by UserService (400), not
    by the schema (422), so both registration paths report it the same way.
    """
    username: str = Field(min_length=1, max_length=50, description="Unique public handle")
    email: EmailStr = Field(description="Unique contact email")
    password: str = Field(description="Plain-text password (min 8 characters)")
    description: Optional[str] = Field(default=None, description="Profile description")


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, description="Registered username")
    password: str = Field(description="Plain-text password")


class EditDetailsRequest(BaseModel):
    """
    Body of PUT /api/{id}/edit/details.

    Both fields are optional; an absent or null field is left unchanged.
    The camelCase aliases are the published wire names.
    """
    new_description: Optional[str] = Field(default=None, alias="newDescription")
    new_email: Optional[EmailStr] = Field(default=None, alias="newEmail")

    model_config = ConfigDict(populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """External representation of a user (password excluded)."""
    id: int = Field(description="User identifier")
    username: str
    email: str
    description: Optional[str] = None
    created_at: datetime = Field(description="Registration timestamp (UTC ISO 8601)")

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(UserResponse):
    """
    Returned by POST /api/login: the user plus a bearer token.

    The client sends the token as `Authorization: Bearer <access_token>`
    on every protected request.
    """
    access_token: str = Field(description="Signed JWT access token")
    token_type: str = Field(default="bearer")
