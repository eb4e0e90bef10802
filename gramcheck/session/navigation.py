"""
Navigation

Collects the redirects a tab asks for. The HTTP layer turns the first one
into a response; in-process callers can watch ``on_redirect``.
"""

from collections import namedtuple
from urllib.parse import urlencode

from gramcheck.session.constants import LOGIN_PAGE

Redirect = namedtuple('Redirect', ['url', 'delay_ms'])


def login_url(reason=None):
    if not reason:
        return LOGIN_PAGE
    return f'{LOGIN_PAGE}?{urlencode({"message": reason})}'


class Navigator:
    """Current page path plus the redirects scheduled from it.

    Scheduled redirects cannot be cancelled.
    """

    def __init__(self, path='/', on_redirect=None):
        self.path = path
        self.redirects = []
        self.on_redirect = on_redirect

    def redirect(self, url, delay_ms=0):
        redirect = Redirect(url, delay_ms)
        self.redirects.append(redirect)
        if self.on_redirect is not None:
            self.on_redirect(redirect)
        return redirect

    @property
    def target(self):
        """The redirect that takes effect first, or ``None``."""
        if not self.redirects:
            return None
        return min(self.redirects, key=lambda r: r.delay_ms)

    @property
    def is_admin_page(self):
        return 'admin' in (self.path or '')

    @property
    def is_grammar_checker_page(self):
        path = (self.path or '').lower()
        return 'grammar-checker' in path or 'grammarchecker' in path
