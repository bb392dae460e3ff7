# =============================================================================
# osca_core/models/user.py
# Acting user of a dashboard session
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from osca_core.models.senior import UserRole


@dataclass(frozen=True)
class SessionUser:
    """Who is using the dashboard; BASCA staff only ever see their own barangay."""
    role: UserRole = UserRole.OSCA
    barangay: Optional[str] = None
    user_id: Optional[str] = None
    name: str = ""

    @property
    def is_basca(self) -> bool:
        return self.role == UserRole.BASCA

    @property
    def scoped_barangay(self) -> Optional[str]:
        """Barangay every read and write is restricted to, if any."""
        return self.barangay if self.is_basca and self.barangay else None
