"""
User accounts

Accounts are keyed by the id the external identity provider issues (the
X-User-ID header). Donor and recipient profiles hang off these accounts and
flip has_completed_profile when they are created.
"""
import logging
from typing import List, Optional, Union

from bloodlink.core.errors import ConflictError
from bloodlink.database.schemas import User, UserInput, UserRole
from bloodlink.database.storage import Repository

logger = logging.getLogger(__name__)


def register_user(repository: Repository, user_id: str, data: UserInput) -> User:
    """
    Create the account record for an authenticated user

    Raises ConflictError if the account already exists.
    """
    if repository.users.find(user_id) is not None:
        raise ConflictError(f"User {user_id} is already registered")

    user = repository.users.create(
        {**data.model_dump(), "has_completed_profile": False},
        entity_id=user_id,
    )
    logger.info("User %s registered as %s", user.id, user.role.value)
    return user


def get_user(repository: Repository, user_id: str) -> User:
    return repository.users.get_by_id(user_id)


def list_users(repository: Repository, role: Optional[Union[UserRole, str]] = None) -> List[User]:
    """
    All accounts ordered by registration time, optionally for one role
    """
    users = repository.users.list()
    if role is not None:
        users = [u for u in users if u.role == UserRole(role)]
    users.sort(key=lambda u: u.created_at)
    return users
