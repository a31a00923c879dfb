"""User Schemas - Pydantic models for the user resource API boundary.

Invariants:
    - Request fields are optional at the schema level: presence and length rules
      belong to UserHandler so the error messages stay stable
    - Unknown request fields are ignored (PUT only ever reads display_name)
    - UserResponse has no credential field

Design Decisions:
    - userId keeps the camelCase key clients already read from the create response
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """POST /users body."""
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    display_name: str | None = None
    password: str | None = None


class UserUpdate(BaseModel):
    """PUT /users/{id} body."""
    model_config = ConfigDict(extra="ignore")

    display_name: str | None = None


class UserResponse(BaseModel):
    """Public projection of a user row."""
    id: int
    email: str
    display_name: str
    role: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "User created"
    user_id: int = Field(alias="userId")


class MessageResponse(BaseModel):
    message: str
