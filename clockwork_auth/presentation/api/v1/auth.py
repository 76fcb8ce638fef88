"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, status

from clockwork_auth.application.dtos.auth_dto import (
    AcknowledgementDTO,
    AuthenticatedDTO,
    BackupCodesDTO,
    ConfirmTwoFactorDTO,
    DisableTwoFactorDTO,
    LoginDTO,
    LoginResultDTO,
    PasswordResetConfirmDTO,
    PasswordResetRequestDTO,
    RefreshTokenDTO,
    SignupDTO,
    TokenPairDTO,
    TwoFactorSetupDTO,
    VerifyTwoFactorDTO,
)
from clockwork_auth.application.dtos.principal_dto import PrincipalDTO
from clockwork_auth.application.services.auth_service import AuthService
from clockwork_auth.domain.services.audit_sink import RequestContext
from clockwork_auth.presentation.dependencies import (
    CurrentPrincipal,
    get_auth_service,
    get_current_principal,
    get_request_context,
)


router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/signup",
    response_model=AuthenticatedDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and receive a token pair.",
)
async def signup(
    dto: SignupDTO,
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """
    Register a new account.

    Raises:
        400 Bad Request: Invalid email, weak password or empty role set
        409 Conflict: Email already registered
    """
    return await auth_service.signup(dto, context)


@router.post(
    "/login",
    response_model=LoginResultDTO,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password. Accounts with 2FA get a challenge token instead of tokens.",
)
async def login(
    dto: LoginDTO,
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """
    Authenticate user.

    Returns status "authenticated" with tokens, or "two_factor_pending"
    with a challenge token to redeem at /auth/2fa/verify.

    Raises:
        401 Unauthorized: If email or password is incorrect
    """
    return await auth_service.login(dto, context)


@router.post(
    "/2fa/verify",
    response_model=LoginResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Complete 2FA login",
)
async def verify_two_factor(
    dto: VerifyTwoFactorDTO,
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """
    Redeem a login challenge with a TOTP or backup code.

    Raises:
        401 Unauthorized: Invalid code, or expired or superseded challenge
    """
    return await auth_service.verify_two_factor(dto, context)


@router.post(
    "/refresh",
    response_model=TokenPairDTO,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Exchange the current refresh token for a new token pair.",
)
async def refresh_token(
    dto: RefreshTokenDTO,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Rotate the refresh token.

    The presented refresh token stops working once this succeeds.

    Raises:
        401 Unauthorized: If refresh token is invalid, expired or superseded
    """
    return await auth_service.refresh(dto)


@router.post(
    "/logout",
    response_model=AcknowledgementDTO,
    status_code=status.HTTP_200_OK,
    summary="Logout",
)
async def logout(
    current: CurrentPrincipal = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """End the session and revoke the access token used for this call."""
    return await auth_service.logout(current.principal.id, current.access_token, context)


@router.post(
    "/password-reset/request",
    response_model=AcknowledgementDTO,
    status_code=status.HTTP_200_OK,
    summary="Request password reset",
)
async def request_password_reset(
    dto: PasswordResetRequestDTO,
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """Always answers the same, whether or not the account exists."""
    return await auth_service.request_password_reset(dto, context)


@router.post(
    "/password-reset/confirm",
    response_model=AcknowledgementDTO,
    status_code=status.HTTP_200_OK,
    summary="Set a new password",
)
async def confirm_password_reset(
    dto: PasswordResetConfirmDTO,
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """
    Set a new password using a reset token.

    Raises:
        400 Bad Request: New password too weak (token stays valid)
        401 Unauthorized: Token invalid, expired or already used
    """
    return await auth_service.confirm_password_reset(dto, context)


@router.post(
    "/2fa/enable",
    response_model=TwoFactorSetupDTO,
    status_code=status.HTTP_200_OK,
    summary="Start 2FA enrollment",
)
async def enable_two_factor(
    current: CurrentPrincipal = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Get a TOTP secret and provisioning URI to scan.

    Raises:
        400 Bad Request: 2FA already enabled
    """
    return await auth_service.enable_two_factor(current.principal.id)


@router.post(
    "/2fa/confirm",
    response_model=BackupCodesDTO,
    status_code=status.HTTP_200_OK,
    summary="Confirm 2FA enrollment",
)
async def confirm_two_factor(
    dto: ConfirmTwoFactorDTO,
    current: CurrentPrincipal = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """
    Activate 2FA with a code from the authenticator app.

    Returns the backup codes; they are not retrievable later.

    Raises:
        400 Bad Request: No pending enrollment
        401 Unauthorized: Wrong code
    """
    return await auth_service.confirm_two_factor_setup(current.principal.id, dto, context)


@router.post(
    "/2fa/disable",
    response_model=AcknowledgementDTO,
    status_code=status.HTTP_200_OK,
    summary="Disable 2FA",
)
async def disable_two_factor(
    dto: DisableTwoFactorDTO,
    current: CurrentPrincipal = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service),
    context: RequestContext = Depends(get_request_context),
):
    """
    Turn 2FA off (requires the account password).

    Raises:
        401 Unauthorized: Wrong password
    """
    return await auth_service.disable_two_factor(current.principal.id, dto, context)


@router.get(
    "/me",
    response_model=PrincipalDTO,
    status_code=status.HTTP_200_OK,
    summary="Get current principal",
)
async def get_me(
    current: CurrentPrincipal = Depends(get_current_principal),
):
    """
    Get the authenticated principal.

    This endpoint requires a valid access token in the Authorization header:
    Authorization: Bearer <your_access_token>

    Raises:
        401 Unauthorized: If token is missing, invalid, expired or revoked
    """
    return current.principal
