# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/register     - Create account, set session cookie
#   POST /auth/login        - Authenticate, set session cookie
#   POST /auth/logout       - Clear session cookie
#   GET  /auth/me           - Get current user
#
# The token itself never appears in a response body; it travels only in
# an httponly cookie.
#
# =============================================================================

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from scribe.auth.accounts import AccountService, AuthResult
from scribe.auth.context import Identity
from scribe.auth.policies import require_auth
from scribe.config import Settings
from scribe.core.models import UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# Request/Response Models
# =============================================================================

# Fields default to empty so that missing input reaches the account
# service and comes back as a displayable validation message.

class RegisterRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


# =============================================================================
# Helpers
# =============================================================================

def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.session_cookie_name, httponly=True)


def _signed_in(result: AuthResult, response: Response, settings: Settings) -> UserResponse:
    set_session_cookie(response, result.token, settings)
    return UserResponse.of(result.user)


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: RegisterRequest,
    response: Response,
    accounts: AccountService = Depends(get_accounts),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a new account.

    Logs the new user in immediately.
    """
    result = await accounts.register(
        data.username, data.email, data.password, data.confirm_password
    )
    return _signed_in(result, response, settings)


@router.post("/login", response_model=UserResponse)
async def login(
    data: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_accounts),
    settings: Settings = Depends(get_app_settings),
):
    """
    Authenticate and start a session.
    """
    result = await accounts.login(data.email, data.password)
    return _signed_in(result, response, settings)


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    """
    Logout. Tokens are stateless, so this only drops the cookie.
    """
    clear_session_cookie(response, settings)
    return {"message": "Logged out successfully"}


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.get("/me", response_model=UserResponse)
async def get_current_user(identity: Identity = Depends(require_auth)):
    """
    Get the current authenticated user.
    """
    return UserResponse.of(identity.user)
