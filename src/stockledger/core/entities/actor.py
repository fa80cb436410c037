"""Authenticated actor supplied by the surrounding application."""

from pydantic import BaseModel


class Actor(BaseModel):
    """Who is performing an operation."""

    id: str
    role: str = "WORKER"

    def has_role(self, roles: list[str]) -> bool:
        return self.role.upper() in {r.upper() for r in roles}


SYSTEM_ACTOR = Actor(id="system", role="SYSTEM")
