"""
Identity snapshot loaded for an authenticated principal, and the store
interface the authentication middleware reads it from.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional, Protocol, Sequence


@dataclass(frozen=True)
class Identity:
    id: int
    company_id: int
    role_id: int
    role_name: str
    email: str
    employee_id: Optional[int] = None

    def to_session(self) -> dict[str, Any]:
        return asdict(self)


class IdentityStore(Protocol):
    def find_active_user_by_id(self, user_id: int) -> Optional[Identity]:
        ...

    def find_permissions_by_role(self, role_id: int) -> Sequence[str]:
        ...
