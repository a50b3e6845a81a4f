from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Actor:
    """Who is acting on this request. Built per request, never stored globally."""

    user_id: str
    role: Optional[str]
    department_id: Optional[str]

    @classmethod
    def from_user(cls, user):
        # role comes from the user_roles row, not from anything the client sent
        return cls(user_id=user.id, role=user.role, department_id=user.department_id)
