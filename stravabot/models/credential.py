from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """Immutable snapshot of the OAuth2 token pair.

    A refresh replaces the whole snapshot, so readers never see a
    half-updated credential.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = ""
    refresh_token: str = Field(..., min_length=1)
    expires_at: int = Field(0, ge=0, description="Absolute expiry, unix seconds")

    def __repr__(self) -> str:
        return f"Credential(expires_at={self.expires_at}, has_access_token={bool(self.access_token)})"

    __str__ = __repr__


class TokenResponse(BaseModel):
    """Payload of a successful refresh-token grant"""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_at: int = Field(..., ge=0)
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
