from pydantic import BaseModel

from app.core.roles import UserRole


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class RegisterResponse(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    is_approved: bool
    message: str


class LoginRequest(BaseModel):
    email: str
    password: str
    role: UserRole


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
