# Rev 0.2.0
from __future__ import annotations

from ..repositories.db import LocalDatabase

ADMIN_LOCK_KEY = "gantt-admin-lock"


class AdminGate:
    """
    Shared password in front of the settings screen.
    Stored and compared as plain text: a deterrent, not access control.
    A fixed (compiled-in/environment) password wins and cannot be changed here.
    """

    def __init__(self, db: LocalDatabase, fixed_password: str = ""):
        self._db = db
        self._fixed = fixed_password

    @property
    def is_fixed(self) -> bool:
        return bool(self._fixed)

    def has_password(self) -> bool:
        return self.is_fixed or bool(self._db.get_item(ADMIN_LOCK_KEY))

    def verify(self, attempt: str) -> bool:
        if self.is_fixed:
            return attempt == self._fixed
        return self._db.get_item(ADMIN_LOCK_KEY) == attempt

    def set_password(self, password: str) -> bool:
        """Empty clears the lock. Returns False when the password is fixed."""
        if self.is_fixed:
            return False
        if not password:
            self._db.remove_item(ADMIN_LOCK_KEY)
        else:
            self._db.set_item(ADMIN_LOCK_KEY, password)
        return True
