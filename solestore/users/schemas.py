from pydantic import BaseModel, Field, EmailStr
from typing import Optional

from solestore.rbac.roles import Role


class CreateUserRequest(BaseModel):
    """POST /users — register an admin account known to the auth provider."""

    external_id: str = Field(..., min_length=1, max_length=100, description="Auth provider user id")
    email: EmailStr
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = None
    role: Role = Role.STAFF
    is_active: bool = True


class UpdateUserRequest(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    image_url: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
