"""
Request Tab Context

Maps an HTTP request onto a ``Tab``: the signed session cookie names the
browser profile (whose persistent store is shared by all of its tabs) and
the ``X-Tab-Id`` header names the tab. A request without a usable header
gets a fresh tab id, returned in the response header.
"""

import logging
import re
import uuid

from flask import current_app, g, request, session

from gramcheck.session import DatabaseStore, MemoryStore, Tab
from gramcheck.session.constants import TAB_ID_KEY

logger = logging.getLogger(__name__)

TAB_HEADER = 'X-Tab-Id'
PROFILE_KEY = 'profile_id'

_TAB_ID_PATTERN = re.compile(r'^[A-Za-z0-9_.-]{1,64}$')


def _profile_id():
    profile_id = session.get(PROFILE_KEY)
    if not profile_id:
        profile_id = uuid.uuid4().hex
        session[PROFILE_KEY] = profile_id
        session.permanent = True
    return profile_id


def current_tab():
    """The ``Tab`` for this request, built once and cached on ``g``.

    A logout broadcast that another tab wrote since this tab's last
    request is applied here.
    """
    if 'tab' not in g:
        ephemeral = MemoryStore()
        tab_id = request.headers.get(TAB_HEADER, '')
        if _TAB_ID_PATTERN.match(tab_id):
            ephemeral.set(TAB_ID_KEY, tab_id)
        elif tab_id:
            logger.warning('Ignoring malformed %s header', TAB_HEADER)

        tab = Tab.from_config(current_app.config, DatabaseStore(_profile_id()), ephemeral, path=request.path)
        tab.auth.reconcile_logout_sync()
        g.tab = tab
    return g.tab


def init_app(app):
    @app.after_request
    def expose_tab_id(response):
        tab = g.get('tab')
        if tab is not None:
            response.headers[TAB_HEADER] = tab.tab_id
        return response
