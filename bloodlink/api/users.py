"""
User account endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from bloodlink.database.schemas import User, UserInput, UserRole
from bloodlink.database.storage import Repository
from bloodlink.api.utils import get_repository, get_user_id
from bloodlink.services.users import get_user, list_users, register_user

router = APIRouter()


@router.post("/users", response_model=User)
async def register(payload: UserInput, request: Request, repository: Repository = Depends(get_repository)):
    """
    Register the calling user (X-User-ID header)

    Returns 409 if the account already exists.
    """
    return register_user(repository, get_user_id(request), payload)


@router.get("/users", response_model=List[User])
async def get_users(role: Optional[UserRole] = None, repository: Repository = Depends(get_repository)):
    """
    Admin user listing, optionally filtered by role
    """
    return list_users(repository, role)


@router.get("/users/me", response_model=User)
async def get_me(request: Request, repository: Repository = Depends(get_repository)):
    return get_user(repository, get_user_id(request))
