"""
Grammar Blueprint

Proxy to the external LanguageTool service.
"""

from flask import Blueprint

grammar_bp = Blueprint('grammar', __name__)

from gramcheck.grammar import routes  # noqa: E402, F401
