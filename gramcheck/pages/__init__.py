"""
Pages Blueprint

Page loads for the login page, the admin panel and the grammar checker.
Each load runs the tab's access checks and either answers with the page
data or sends the browser to the login page.
"""

from flask import Blueprint

pages_bp = Blueprint('pages', __name__)

from gramcheck.pages import routes  # noqa: E402, F401
