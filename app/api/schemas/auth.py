from pydantic import BaseModel, EmailStr

from app.models.admin import AdminPublic


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignupRequest(BaseModel):
    name: str | None = None
    email: EmailStr
    password: str | None = None
    notification_email: EmailStr | None = None
    unique_link_slug: str | None = None


class TokenResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    admin: AdminPublic | None = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str | None = None
    new_password: str | None = None


class DeleteAccountRequest(BaseModel):
    password: str | None = None


class ProfileUpdateRequest(BaseModel):
    name: str | None = None
    notification_email: EmailStr | None = None
    unique_link_slug: str | None = None


class MessageResponse(BaseModel):
    message: str
