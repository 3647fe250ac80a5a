from fastapi import APIRouter, Depends, status

from infrastructure.database.models.users import User
from routers.dependencies import get_auth_service, get_current_user
from schemas import (
    ApiResponse,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserPublic,
    success_response,
)
from services.auth import AuthResult, AuthService

router = APIRouter()


def _auth_payload(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        user=UserPublic.model_validate(result.user),
    )


@router.post(
    "/auth/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return success_response(201, "User registered successfully", _auth_payload(result))


@router.post("/auth/login", response_model=ApiResponse[AuthResponse], summary="Log in")
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.login(email=payload.email, password=payload.password)
    return success_response(200, "Login successful", _auth_payload(result))


@router.get("/auth/profile", response_model=ApiResponse[UserPublic], summary="Current user")
async def profile(current_user: User = Depends(get_current_user)):
    return success_response(200, "Profile retrieved successfully", UserPublic.model_validate(current_user))
