from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings
from app.core.resources import BookingResources, get_booking_resources
from app.schemas.auth import AuthTokenResponse, CurrentUserResponse, LoginRequest, RegisterRequest
from app.services.security_utils import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.services.user_store import CLIENT_ROLE, STYLIST_ROLE, UserStore

_HTTP_BEARER = HTTPBearer(auto_error=False)


class AuthService:
    def __init__(self, settings: Settings, user_store: UserStore) -> None:
        self.settings = settings
        self.user_store = user_store

    def register(self, payload: RegisterRequest) -> AuthTokenResponse:
        full_name = payload.full_name.strip()
        email = payload.email.strip().lower()
        password = payload.password

        if len(full_name) < 2:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="full_name must contain at least 2 characters.",
            )
        if "@" not in email:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="email must be a valid email address.",
            )
        if len(password) < 4:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="password must contain at least 4 characters.",
            )

        try:
            user_record = self.user_store.create_user(
                email=email,
                full_name=full_name,
                password_hash=hash_password(password),
                role=STYLIST_ROLE if payload.is_stylist else CLIENT_ROLE,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email already exists.",
            ) from exc
        return self._build_auth_token_response(user_record)

    def login(self, payload: LoginRequest) -> AuthTokenResponse:
        user_record = self.user_store.get_user_by_email(payload.email)
        if not user_record or not verify_password(
            payload.password,
            str(user_record.get("password_hash", "")),
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password.",
            )
        return self._build_auth_token_response(user_record)

    def get_current_user_from_token(self, access_token: str) -> CurrentUserResponse:
        payload = decode_access_token(access_token, self.settings.auth_secret_key)
        if not payload:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired access token.",
            )

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid access token payload.",
            )

        user_record = self.user_store.get_user_by_id(subject)
        if not user_record:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found for this access token.",
            )
        return to_current_user_response(user_record)

    def _build_auth_token_response(self, user_record: dict[str, object]) -> AuthTokenResponse:
        current_user = to_current_user_response(user_record)
        access_token, expires_in_seconds = create_access_token(
            subject=current_user.id,
            role=current_user.role,
            secret_key=self.settings.auth_secret_key,
            ttl_minutes=self.settings.auth_token_ttl_minutes,
        )
        return AuthTokenResponse(
            access_token=access_token,
            expires_in_seconds=expires_in_seconds,
            user=current_user,
        )


def to_current_user_response(user_record: dict[str, object]) -> CurrentUserResponse:
    return CurrentUserResponse(
        id=str(user_record.get("_id", "")),
        email=str(user_record.get("email", "")),
        full_name=str(user_record.get("full_name", "")),
        role=str(user_record.get("role", CLIENT_ROLE)),
    )


def get_auth_service(
    resources: BookingResources = Depends(get_booking_resources),
) -> AuthService:
    return AuthService(get_settings(), resources.user_store)


def require_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_HTTP_BEARER),
    service: AuthService = Depends(get_auth_service),
) -> CurrentUserResponse:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
        )
    return service.get_current_user_from_token(credentials.credentials)


def require_stylist(
    current_user: CurrentUserResponse = Depends(require_current_user),
) -> CurrentUserResponse:
    if current_user.role != STYLIST_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only stylists can manage availability and appointments.",
        )
    return current_user
