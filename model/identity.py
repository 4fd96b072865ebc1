# model/identity.py
from pydantic import BaseModel, Field


class Identity(BaseModel):
    """Verified claims from the identity provider's userinfo endpoint."""

    given_name: str = Field(min_length=1)
    family_name: str = Field(min_length=1)
    preferred_username: str = Field(min_length=1)
    email: str | None = None

    @property
    def folder_key(self) -> str:
        # Deterministic per user; doubles as the Drive folder name.
        return f"{self.family_name}_{self.given_name}_{self.preferred_username}"
