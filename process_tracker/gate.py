"""Optional shared-password prompt in front of the tracker."""

import hmac
import logging

logger = logging.getLogger(__name__)


class PasswordGate:
    """Remembers a successful unlock for the lifetime of the session.

    A deterrent, not authentication: there is one shared password and no users.
    """

    def __init__(self, password: str | None = None) -> None:
        self._password = password or ""
        self._unlocked = False

    @property
    def enabled(self) -> bool:
        return bool(self._password)

    @property
    def is_unlocked(self) -> bool:
        return not self.enabled or self._unlocked

    def unlock(self, candidate: str) -> bool:
        if not self.enabled:
            return True
        if hmac.compare_digest(candidate.encode("utf-8"), self._password.encode("utf-8")):
            self._unlocked = True
            logger.info("Gate unlocked")
            return True
        logger.warning("Gate: wrong password")
        return False
