"""Authentication models for FastAPI"""

from pydantic import BaseModel

ADMIN_ROLE = "admin"


class User(BaseModel):
    user_id: str
    claims: dict

    @property
    def role(self) -> str:
        return self.claims.get("role") or "user"


def is_admin(user: User) -> bool:
    """Admins may manage competitions and read anyone's registrations"""
    return user.role == ADMIN_ROLE


def can_view_user(user: User, target_user_id: str) -> bool:
    """A user can view their own records; admins can view everyone's"""
    return is_admin(user) or user.user_id == str(target_user_id)
