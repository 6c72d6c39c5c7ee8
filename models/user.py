from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def author_name(self) -> str:
        """Name shown next to the user's posts and comments"""
        return self.display_name or self.email or "Anonymous"


class AuthState(BaseModel):
    current_user: Optional[User] = None
    loading: bool = True
