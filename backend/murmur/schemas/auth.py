"""
Murmur Backend — Identity Request/Response Schemas
====================================================

What:  API contracts for /api/register and /api/login.

Request fields are Optional on purpose: a missing or empty field is a
business-rule failure reported by IdentityService as a 400 `invalid_input`,
not a schema error, so every failure keeps the same JSON error shape.
"""

from typing import Optional

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Body of POST /api/register and POST /api/login."""
    username: Optional[str] = Field(default=None, description="Login name")
    password: Optional[str] = Field(default=None, description="Plain-text password")


class UserResponse(BaseModel):
    """Public identity of a user. The password hash is never part of it."""
    id: int = Field(description="User identifier")
    username: str = Field(description="Login name")

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """Signed bearer token returned by a successful login."""
    token: str = Field(description="JWT; send as 'Authorization: Bearer <token>'")


class AuthenticatedUser(BaseModel):
    """
    Identity decoded from a valid token by the token guard.

    Handlers receive this instead of a User row: the guard is stateless and
    never touches the store.
    """
    id: int
    username: str
