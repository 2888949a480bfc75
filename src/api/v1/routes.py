"""
API v1 routes.

Defines REST endpoints for signup (OTP issue, resend, verify), login,
and the authenticated profile and password endpoints. Handlers are plain
``def`` so FastAPI runs them in its threadpool; bcrypt and SMTP calls
never block the event loop.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import (
    get_account_service,
    get_current_account,
    get_registration_service,
    get_session_service,
)
from src.api.models import (
    AuthResponse,
    ChangePasswordRequest,
    EmailAvailabilityResponse,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ResendOtpRequest,
    ResendOtpResponse,
    SignupRequest,
    SignupResponse,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserProfile,
    VerifyOtpRequest,
)
from src.domain.accounts import AccountService
from src.domain.exceptions import (
    AccountNotFound,
    DomainError,
    InvalidCredentials,
    InvalidRegistration,
    ResendTooSoon,
)
from src.domain.models import Account, RegistrationPayload
from src.domain.registration import RegistrationService
from src.domain.sessions import SessionService

router = APIRouter(tags=["v1"])

# Stable HTTP status and user-facing message per error category
_ERRORS: dict[str, tuple[int, str]] = {
    "validation": (status.HTTP_400_BAD_REQUEST, "All fields are required and must be well-formed"),
    "conflict": (status.HTTP_409_CONFLICT, "User already exists with this email"),
    "not_found": (status.HTTP_404_NOT_FOUND, "OTP not found or expired"),
    "invalid_code": (status.HTTP_400_BAD_REQUEST, "Invalid OTP"),
    "invalid_credentials": (status.HTTP_401_UNAUTHORIZED, "Invalid email or password"),
    "rate_limited": (status.HTTP_429_TOO_MANY_REQUESTS, "Please wait before requesting another OTP"),
    "locked": (423, "Account is locked. Please try again later or reset your password."),
    "delivery_failed": (status.HTTP_502_BAD_GATEWAY, "Failed to send email. Please try again."),
    "invalid_token": (status.HTTP_401_UNAUTHORIZED, "Invalid or expired token"),
    "protected_field": (status.HTTP_400_BAD_REQUEST, "Email and password cannot be updated through this route"),
    "wrong_password": (status.HTTP_401_UNAUTHORIZED, "Current password is incorrect"),
    "same_password": (status.HTTP_400_BAD_REQUEST, "New password must be different from current password"),
    "password_reused": (status.HTTP_400_BAD_REQUEST, "New password cannot be one of your previous passwords"),
}


def _http_error(exc: DomainError) -> HTTPException:
    """Translate a domain error into its stable HTTP response."""
    status_code, message = _ERRORS[exc.category]
    detail: dict = {"category": exc.category, "message": message}
    headers = None
    if isinstance(exc, InvalidRegistration):
        detail["fields"] = exc.errors
    if isinstance(exc, ResendTooSoon):
        headers = {"Retry-After": str(exc.retry_after)}
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


def _profile(account: Account) -> UserProfile:
    return UserProfile(**account.public_profile())


@router.post(
    "/auth/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid signup fields"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        502: {"model": ErrorResponse, "description": "OTP email could not be sent"},
        422: {"description": "Validation error"},
    },
    summary="Start signup",
    description="Submit signup fields. A 6-digit OTP valid for 10 minutes "
    "is emailed to the address; no account exists until it is verified.",
)
def signup(
    request_data: SignupRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> SignupResponse:
    payload = RegistrationPayload(
        name=request_data.name,
        password=request_data.password,
        country=request_data.country,
        contact=request_data.contact,
    )
    try:
        normalized_email = service.request_registration(request_data.email, payload)
    except DomainError as exc:
        raise _http_error(exc) from None
    return SignupResponse(
        message="OTP sent to your email. Please verify to complete registration.",
        email=normalized_email,
        expires_in_seconds=service.otp_ttl_seconds,
    )


@router.post(
    "/auth/resend-otp",
    response_model=ResendOtpResponse,
    responses={
        404: {"model": ErrorResponse, "description": "No pending registration"},
        429: {"model": ErrorResponse, "description": "Resend cooldown not elapsed"},
        502: {"model": ErrorResponse, "description": "OTP email could not be sent"},
    },
    summary="Resend signup OTP",
)
def resend_otp(
    request_data: ResendOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> ResendOtpResponse:
    try:
        service.resend_code(request_data.email)
    except DomainError as exc:
        raise _http_error(exc) from None
    return ResendOtpResponse(message="New OTP sent to your email", email=request_data.email.lower())


@router.post(
    "/auth/verify-otp",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid OTP"},
        404: {"model": ErrorResponse, "description": "OTP not found or expired"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Verify OTP and create account",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    try:
        result = service.verify_code(request_data.email, request_data.otp)
    except DomainError as exc:
        raise _http_error(exc) from None
    return AuthResponse(
        message="Email verified and account created successfully!",
        user=_profile(result.account),
        token=result.token,
    )


@router.post(
    "/auth/login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
        423: {"model": ErrorResponse, "description": "Account temporarily locked"},
    },
    summary="Log in with email and password",
)
def login(
    request_data: LoginRequest,
    service: SessionService = Depends(get_session_service),
) -> AuthResponse:
    try:
        result = service.authenticate(request_data.email, request_data.password)
    except AccountNotFound:
        # Unknown email and wrong password look the same from outside
        raise _http_error(InvalidCredentials(request_data.email)) from None
    except DomainError as exc:
        raise _http_error(exc) from None
    return AuthResponse(message="Login successful!", user=_profile(result.account), token=result.token)


@router.get(
    "/auth/profile",
    response_model=ProfileResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid or expired token"}},
    summary="Current user's profile",
)
def profile(account: Account = Depends(get_current_account)) -> ProfileResponse:
    return ProfileResponse(user=_profile(account))


@router.put(
    "/auth/profile",
    response_model=UpdateProfileResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email or password change attempted, or blank field"},
        401: {"model": ErrorResponse, "description": "Invalid or expired token"},
        422: {"description": "Validation error"},
    },
    summary="Update profile",
    description="Edit name, country and contact. Omitted fields keep their value; "
    "email and password cannot be changed here.",
)
def update_profile(
    request_data: UpdateProfileRequest,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
) -> UpdateProfileResponse:
    try:
        updated = service.update_profile(account, request_data.model_dump(exclude_unset=True))
    except DomainError as exc:
        raise _http_error(exc) from None
    return UpdateProfileResponse(message="Profile updated successfully", user=_profile(updated))


@router.post(
    "/auth/change-password",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "New password is the current or a recent one"},
        401: {"model": ErrorResponse, "description": "Invalid token or wrong current password"},
        422: {"description": "Validation error"},
    },
    summary="Change password",
    description="Requires the current password. The current password and the "
    "five before it cannot be reused. Clears any login lockout.",
)
def change_password(
    request_data: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        service.change_password(account, request_data.current_password, request_data.new_password)
    except DomainError as exc:
        raise _http_error(exc) from None
    return MessageResponse(message="Password changed successfully")


@router.get(
    "/auth/check-email/{email}",
    response_model=EmailAvailabilityResponse,
    summary="Check whether an email is free to register",
)
def check_email(
    email: str,
    service: RegistrationService = Depends(get_registration_service),
) -> EmailAvailabilityResponse:
    return EmailAvailabilityResponse(email=email.strip().lower(), available=service.is_email_available(email))
