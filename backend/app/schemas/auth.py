from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class UserRegister(BaseModel):
    # Format and strength rules are checked by the service so that every
    # failing field is reported together.
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    first_name: str = Field("", alias="firstName", max_length=100)
    last_name: str = Field("", alias="lastName", max_length=100)
    username: Optional[str] = Field(None, max_length=100)
    role: Optional[str] = None
    admin_code: Optional[str] = Field(None, alias="adminCode")


class UserLogin(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Optional[str] = None
    admin_code: Optional[str] = Field(None, alias="adminCode")


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class Principal(BaseModel):
    """Verified access-token claims attached to a request"""
    id: str
    email: str
    role: str


class UserResponse(BaseModel):
    id: str
    email: str
    username: str
    first_name: str = ""
    last_name: str = ""
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AuthPayload(BaseModel):
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    success: bool = True
    data: AuthPayload
