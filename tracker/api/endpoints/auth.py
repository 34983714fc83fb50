"""
Signup and login endpoints (no credential required)

Endpoint        Repository operation          Status Codes
--------------  ----------------------------  ---------------------------
POST /signup    UserRepository.create         201, 400, 409
POST /login     UserRepository.authenticate   200, 400, 401
"""

from fastapi import APIRouter, status

from tracker.api.deps import Users
from tracker.core.security import issue_token
from tracker.models.user import LoginRequest, LoginResponse, UserCreate, UserDraft, UserRead

router = APIRouter()


@router.post(
    "/signup",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "User already exists"}},
)
async def signup(user_data: UserCreate, users: Users) -> UserRead:
    """
    Register a new user
    """
    user = await users.create(
        UserDraft(
            name=user_data.name,
            email=str(user_data.email),
            password=user_data.password,
        )
    )
    return UserRead.from_entity(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials"}},
)
async def login(login_data: LoginRequest, users: Users) -> LoginResponse:
    """
    Exchange name and password for the placeholder bearer token
    """
    user = await users.authenticate(login_data.name, login_data.password)
    return LoginResponse(token=issue_token(user.name))
