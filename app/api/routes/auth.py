import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.api.schemas.auth import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
)
from app.core.db import get_session
from app.models.admin import Admin, AdminCreate, AdminPublic, AdminUpdate
from app.services.auth_service import (
    admin_to_public,
    change_password,
    delete_account,
    login_admin,
    request_password_reset,
    reset_password,
    signup_admin,
    update_profile,
)
from app.services.email_service import send_password_reset_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    admin, token = await signup_admin(
        session,
        AdminCreate(
            name=body.name or "",
            email=body.email,
            password=body.password or "",
            notification_email=body.notification_email or "",
            unique_link_slug=body.unique_link_slug or "",
        ),
    )
    return TokenResponse(message="Admin registered successfully.", token=token, admin=admin_to_public(admin))


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    admin, token = await login_admin(session, body.email, body.password)
    return TokenResponse(message="Login successful.", token=token, admin=admin_to_public(admin))


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    raw_token = await request_password_reset(session, body.email)
    if raw_token:
        background_tasks.add_task(send_password_reset_email, body.email, raw_token)
    else:
        logger.info("Password reset requested for unknown email")
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset(
    token: str,
    body: ResetPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await reset_password(session, token, body.password or "")
    return MessageResponse(message="Password has been reset successfully.")


@router.get("/me", response_model=AdminPublic)
async def me(current_admin: Admin = Depends(get_current_admin)) -> AdminPublic:
    return admin_to_public(current_admin)


@router.put("/me", response_model=AdminPublic)
async def update_me(
    body: ProfileUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> AdminPublic:
    admin = await update_profile(
        session,
        current_admin,
        AdminUpdate(
            name=body.name,
            notification_email=body.notification_email,
            unique_link_slug=body.unique_link_slug,
        ),
    )
    return admin_to_public(admin)


@router.post("/change-password", response_model=MessageResponse)
async def update_password(
    body: ChangePasswordRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    await change_password(session, current_admin, body.current_password or "", body.new_password or "")
    return MessageResponse(message="Password updated successfully.")


@router.delete("/delete-account", response_model=MessageResponse)
async def remove_account(
    body: DeleteAccountRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    await delete_account(session, current_admin.id, body.password)
    return MessageResponse(message="Account and all associated data have been deleted.")
