"""
Grammar Routes
"""

import logging

from flask import current_app, jsonify
from flask_login import current_user, login_required

from gramcheck.auth.routes import request_data
from gramcheck.grammar import grammar_bp
from gramcheck.grammar.services import LanguageToolError

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 20000


def languagetool():
    return current_app.extensions['languagetool']


@grammar_bp.route('/check', methods=['POST'])
@login_required
def check():
    """Check ``text`` in ``language`` (default ``auto``)."""
    data = request_data()
    text = data.get('text') or ''
    language = data.get('language') or 'auto'

    if not text.strip():
        return jsonify(success=False, error='Text is required.'), 400
    if len(text) > MAX_TEXT_LENGTH:
        return jsonify(success=False, error=f'Text must be at most {MAX_TEXT_LENGTH} characters.'), 400

    result = languagetool().check_grammar(text, language)
    logger.info('Grammar check for %s: %d matches', current_user.username, len(result['matches']))
    return jsonify(success=True, data=result)


@grammar_bp.route('/detect', methods=['POST'])
@login_required
def detect():
    text = (request_data().get('text') or '').strip()
    if not text:
        return jsonify(success=False, error='Text is required.'), 400
    return jsonify(success=True, data={'language': languagetool().detect_language(text)})


@grammar_bp.route('/languages')
def languages():
    return jsonify(success=True, data=languagetool().get_languages())


@grammar_bp.route('/health')
def health():
    """Reports whether LanguageTool answers."""
    service = languagetool()
    try:
        service.get_languages()
    except LanguageToolError as e:
        return jsonify(success=False, status='unavailable', error=e.message, cache=service.cache_stats()), 503
    return jsonify(success=True, status='ok', cache=service.cache_stats())
