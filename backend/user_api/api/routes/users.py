"""User Routes - create, list, fetch, replace and delete users.

Invariants:
    - Bodies are parsed by UserCreate; field rules and normalization live in the core
    - Status mapping: 201 create, 200 reads/update/delete, errors via UserApiError handler
    - GET /api/users?email=... resolves through the store's exact-match email lookup
"""

from fastapi import APIRouter, Depends, Query, status

from user_api.api.dependencies import get_user_service
from user_api.api.responses import created_response, success_response
from user_api.schemas.user import UserCreate
from user_api.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate, service: UserService = Depends(get_user_service),
):
    """Create a user."""
    user = service.create_user(body.to_creation_request())
    return created_response("User created successfully", user.to_dict())


@router.get("")
async def list_users(
    email: str | None = Query(None),
    service: UserService = Depends(get_user_service),
):
    """List all users, or the single user holding `email`."""
    if email:
        users = [service.get_user_by_email(email)]
    else:
        users = service.list_users()
    return success_response(
        "Users retrieved successfully", [u.to_dict() for u in users],
    )


@router.get("/{user_id}")
async def get_user(
    user_id: str, service: UserService = Depends(get_user_service),
):
    user = service.get_user(user_id)
    return success_response("User retrieved successfully", user.to_dict())


@router.put("/{user_id}")
async def update_user(
    user_id: str, body: UserCreate,
    service: UserService = Depends(get_user_service),
):
    """Replace every field of a user; id and created_at are kept."""
    user = service.update_user(user_id, body.to_creation_request())
    return success_response("User updated successfully", user.to_dict())


@router.delete("/{user_id}")
async def delete_user(
    user_id: str, service: UserService = Depends(get_user_service),
):
    service.delete_user(user_id)
    return success_response("User deleted successfully", {"id": user_id})
