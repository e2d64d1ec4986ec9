"""
RedSocial Backend — Authentication Schemas
============================================

What:  The resolved caller identity and the token payload returned by /auth.
"""

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """
    The authenticated caller of the current request.

    Built by the authentication gate from a verified token and passed to
    services for ownership checks. Lives only as long as the request.
    """
    user_id: int
    username: str

    model_config = {"frozen": True}


class TokenResponse(BaseModel):
    """Returned by POST /auth/login and POST /auth/register."""
    access_token: str = Field(description="Signed JWT access token")
    token_type: str = Field(default="bearer")
