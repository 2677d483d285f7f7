"""Auth router - API endpoints for authentication."""
from fastapi import APIRouter, Depends, status

from app.database import get_database
from app.dependencies import CurrentIdentity, TokenServiceDep
from app.models.user import AuthResponse, SigninRequest, SignupRequest, User
from app.services.auth_service import AuthService


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: SignupRequest, tokens: TokenServiceDep, db=Depends(get_database)):
    """
    Register a new user and return a token for it.

    Args:
        payload: Username, password, name and email
        tokens: Token service
        db: Database connection

    Returns:
        Token and the public user object

    Raises:
        ValidationError: If any field is missing (400)
        ConflictError: If the username or email is taken (409)
    """
    service = AuthService(db, tokens)
    return await service.signup(payload)


@router.post("/signin", response_model=AuthResponse)
async def signin(payload: SigninRequest, tokens: TokenServiceDep, db=Depends(get_database)):
    """
    Sign in and return a token.

    Raises:
        ValidationError: If username or password is missing (400)
        AuthError: If the credentials are invalid (401)
    """
    service = AuthService(db, tokens)
    return await service.signin(payload)


@router.get("/me", response_model=User)
async def get_current_user(
    identity: CurrentIdentity,
    tokens: TokenServiceDep,
    db=Depends(get_database),
):
    """
    Get current authenticated user.

    Raises:
        NotFoundError: If the account no longer exists (404)
    """
    service = AuthService(db, tokens)
    return await service.get_user_by_id(identity.user_id)
