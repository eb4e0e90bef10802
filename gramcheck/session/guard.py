"""
Access Guard

Checked once when a protected page loads. A failed check shows a notice
and redirects to the login page after a short delay so the notice can be
read. The redirect cannot be cancelled once scheduled.
"""

import logging

from gramcheck.session import signals
from gramcheck.session.constants import (
    DEFAULT_REDIRECT_DELAY_MS,
    REASON_ADMIN_REQUIRED,
    REASON_LOGIN_REQUIRED,
)
from gramcheck.session.navigation import login_url

logger = logging.getLogger(__name__)


class AccessGuard:
    def __init__(self, coordinator, delay_ms=DEFAULT_REDIRECT_DELAY_MS):
        self.coordinator = coordinator
        self.delay_ms = delay_ms

    def _requirement(self):
        navigator = self.coordinator.navigator
        if navigator.is_admin_page:
            return (self.coordinator.can_access_admin_panel, REASON_ADMIN_REQUIRED,
                    'Admin privileges required for this panel')
        if navigator.is_grammar_checker_page:
            return (self.coordinator.can_access_grammar_checker, REASON_LOGIN_REQUIRED,
                    'Please login to use the grammar checker')
        return None

    def check(self, path=None):
        """Return ``True`` if the page may be shown; otherwise schedule a redirect."""
        navigator = self.coordinator.navigator
        if path is not None:
            navigator.path = path

        requirement = self._requirement()
        if requirement is None:
            return True
        predicate, reason, message = requirement
        if predicate():
            user = self.coordinator.get_current_user()
            logger.info('Access to %s validated for %s (%s)', navigator.path, user.username, user.user_role)
            return True

        logger.warning('Access denied to %s: %s', navigator.path, reason)
        signals.access_denied.send(self.coordinator, reason=reason, message=message, path=navigator.path)
        navigator.redirect(login_url(reason), delay_ms=self.delay_ms)
        return False
