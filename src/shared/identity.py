"""Principals: the explicit caller identity passed into every operation.

The identity collaborator (an external user directory) authenticates the
caller; this module only models the result: a user id plus the groups the
directory reports. Commands carry the principal as ``actor_id`` and
``actor_groups`` (JSON list) so authorization is decided per call inside the
command handler, never from ambient request state.
"""

import json
from dataclasses import dataclass, field

from shared.errors import AuthorizationFailure

ADMIN_GROUPS = frozenset({"site_admin", "admin"})
SYSTEM_ACTOR = "system"


@dataclass(frozen=True)
class Principal:
    user_id: str
    groups: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return bool(self.groups & ADMIN_GROUPS)

    @classmethod
    def of(cls, user_id: str, *groups: str) -> "Principal":
        return cls(user_id=str(user_id), groups=frozenset(groups))

    @classmethod
    def system(cls) -> "Principal":
        """Principal used by scheduled jobs and the CLI."""
        return cls(user_id=SYSTEM_ACTOR, groups=frozenset({"site_admin"}))

    @classmethod
    def from_command(cls, command) -> "Principal":
        raw = command.actor_groups
        groups = json.loads(raw) if isinstance(raw, str) and raw else (raw or [])
        return cls(user_id=str(command.actor_id), groups=frozenset(groups))

    def as_actor(self) -> dict:
        """Keyword arguments for the ``actor_id``/``actor_groups`` command fields."""
        return {"actor_id": self.user_id, "actor_groups": json.dumps(sorted(self.groups))}


def require_admin(principal: Principal, action: str) -> None:
    """Raise unless the principal belongs to an admin group."""
    if not principal.is_admin:
        raise AuthorizationFailure(f"Admin access required to {action}")
