from typing import Literal

from pydantic import BaseModel

UserRole = Literal["stylist", "client"]


class CurrentUserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    role: UserRole


class RegisterRequest(BaseModel):
    full_name: str
    email: str
    password: str
    is_stylist: bool = False


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthTokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in_seconds: int
    user: CurrentUserResponse
