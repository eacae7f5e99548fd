"""
Profile schemas — self-service edits of the signed-in admin's own account.
"""

from pydantic import BaseModel, Field
from typing import Optional


class UpdateProfileRequest(BaseModel):
    """PUT /profile — only name and avatar; email and role go through /users."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
