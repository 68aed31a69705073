"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
"""

from typing import Optional

from models.user import User
from repositories.base_repo import BaseRepository


class UserRepository(BaseRepository):
    """Repository for CRUD operations on the users table."""

    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Fetch a user by their (unique) email address.

        Returns:
            User or None.
        """
        return self._get_by("email", email)
