from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Optional

# --- Authentication Schemas ---

class UserCreate(BaseModel):
    # Optional so a missing field surfaces as "All fields are required" rather than a schema error.
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str

class UserProfile(UserSummary):
    """Full user record minus the password."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    created_at: datetime = Field(alias="createdAt")

class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserSummary

# --- Chat Schemas ---

class ChatRequest(BaseModel):
    """Schema for the incoming chat request from the frontend."""
    message: str
    session_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("sessionId", "session_id")
    )

class ChatResponse(BaseModel):
    """Schema for the outgoing chat response to the frontend."""
    model_config = ConfigDict(populate_by_name=True)

    response: str
    session_id: str = Field(alias="sessionId")

class VoiceResponse(BaseModel):
    text: str

class ErrorResponse(BaseModel):
    error: str
