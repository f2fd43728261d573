from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from a Supabase JWT.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"
    user_metadata: dict = Field(default_factory=dict)

    @property
    def full_name(self) -> Optional[str]:
        return self.user_metadata.get("full_name") or self.user_metadata.get("name")
