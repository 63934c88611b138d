"""Authentication schemas."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Optional


class LoginRequest(BaseModel):
    """First-factor credentials. Also accepts email/username and password field names."""
    identity: str = Field(min_length=1, validation_alias=AliasChoices("identity", "email", "username"))
    secret: str = Field(validation_alias=AliasChoices("secret", "password"))


class LoginResponse(BaseModel):
    """Where to send the user agent for the second factor."""
    model_config = ConfigDict(populate_by_name=True)

    redirect_url: str = Field(alias="redirectUrl")


class UserInfo(BaseModel):
    """Identity claims of the current session."""
    id: str
    email: str
    username: Optional[str] = None


class MeResponse(BaseModel):
    user: UserInfo


class ProtectedResponse(BaseModel):
    message: str
    user: UserInfo


class MessageResponse(BaseModel):
    """Error body returned by every failing endpoint."""
    message: str


class HealthResponse(BaseModel):
    status: str
