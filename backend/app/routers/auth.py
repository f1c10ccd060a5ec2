"""
Authentication router: email/password registration and login.
"""

from fastapi import APIRouter, Depends, status

from community.schemas import LoginRequest, RegisterRequest
from community.services import AuthService, Principal

from ..auth.dependencies import get_current_principal
from ..dependencies import get_auth_service
from ..schemas import AuthResponse, UserResponse
from ..services.serializers import auth_response, user_to_dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create a member account and return it with a bearer token."""
    user, token = auth_service.register(request)
    return auth_response(user, token)


@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    user, token = auth_service.login(request)
    return auth_response(user, token)


@router.get("/me", response_model=UserResponse)
def me(
    principal: Principal = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service),
):
    return UserResponse(**user_to_dict(auth_service.get_user(principal.user_id)))
