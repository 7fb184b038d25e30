from fastapi import APIRouter, Depends, Response

from flowpad.config import settings
from flowpad.schemas.api_schemas import AuthResponse, GoogleAuthRequest, MessageResponse, UserSummary
from flowpad.dependencies import get_auth_service, get_current_user, get_user_repository
from flowpad.db.models import User
from flowpad.db.repositories.users import UserRepository
from flowpad.application.auth_service import AuthService

router = APIRouter(prefix="/api")


def _user_summary(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name}


@router.post("/auth/google", response_model=AuthResponse)
def google_sign_in(
    body: GoogleAuthRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    users: UserRepository = Depends(get_user_repository),
):
    """
    Exchange a Google ID token for a session token.

    The token is returned in the body and set as an httpOnly cookie.
    """
    identity = auth.verify_google_credential(body.idToken)
    user = users.get_or_create(identity["google_id"], identity["email"], identity["name"])
    token = auth.create_token(user.id)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=auth.expires_in_seconds,
        path="/",
    )
    return {"token": token, "user": _user_summary(user)}


@router.post("/auth/logout", response_model=MessageResponse)
def logout(response: Response):
    """
    Clear the session cookie.
    """
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/user/profile", response_model=UserSummary)
def profile(user: User = Depends(get_current_user)):
    """
    The signed-in user.
    """
    return _user_summary(user)
