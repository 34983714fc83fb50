"""
User endpoints (the caller must be the {user} in the path)

Endpoint          Repository operation        Status Codes
----------------  --------------------------  -------------------------------
GET /{user}       UserRepository.find         200, 401, 403, 404
PATCH /{user}     UserRepository.update       200, 400, 401, 403, 404, 409
DELETE /{user}    UserRepository.soft_delete  204, 401, 403, 404
"""

from fastapi import APIRouter, Depends, Response, status

from tracker.api.deps import Users
from tracker.core.security import CurrentUser, authorize_path_user
from tracker.models.user import UserRead, UserUpdate

router = APIRouter(prefix="/{user}", dependencies=[Depends(authorize_path_user)])


@router.get("", response_model=UserRead)
async def get_user(username: CurrentUser, users: Users) -> UserRead:
    """
    Get the caller's profile
    """
    user = await users.find(username)
    return UserRead.from_entity(user)


@router.patch("", response_model=UserRead)
async def update_user(username: CurrentUser, user_data: UserUpdate, users: Users) -> UserRead:
    """
    Update the caller's name and/or email
    """
    changes = user_data.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] is not None:
        changes["email"] = str(changes["email"])

    user = await users.update(username, changes)
    return UserRead.from_entity(user)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(username: CurrentUser, users: Users) -> Response:
    """
    Soft-delete the caller with all of their projects and tasks
    """
    await users.soft_delete(username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
