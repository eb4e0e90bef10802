"""
LanguageTool Service

Grammar checks are delegated to the LanguageTool HTTP API. Results are
cached in memory for a few minutes, the language list for an hour.
"""

import hashlib
import logging
import time

import requests

logger = logging.getLogger(__name__)


class LanguageToolError(Exception):
    """LanguageTool could not be reached or returned an unusable answer."""

    def __init__(self, message, status_code=500, details=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def _now_ms():
    return int(time.time() * 1000)


class LanguageToolService:
    def __init__(self, base_url, timeout_ms=10000, cache_timeout_ms=5 * 60 * 1000,
                 languages_cache_timeout_ms=60 * 60 * 1000):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout_ms / 1000.0
        self.cache_timeout_ms = cache_timeout_ms
        self.languages_cache_timeout_ms = languages_cache_timeout_ms
        self._grammar_cache = {}
        self._languages = None
        self._languages_fetched_at = 0

    @classmethod
    def from_config(cls, config):
        return cls(
            config['LANGUAGETOOL_API_URL'],
            timeout_ms=config.get('API_TIMEOUT', 10000),
            cache_timeout_ms=config.get('GRAMMAR_CACHE_TIMEOUT', 5 * 60 * 1000),
            languages_cache_timeout_ms=config.get('LANGUAGES_CACHE_TIMEOUT', 60 * 60 * 1000),
        )

    @staticmethod
    def _cache_key(text, language):
        return hashlib.sha256(f'{language}\x00{text}'.encode('utf-8')).hexdigest()

    def _cached(self, key):
        entry = self._grammar_cache.get(key)
        if entry is None:
            return None
        stored_at, data = entry
        if _now_ms() - stored_at > self.cache_timeout_ms:
            del self._grammar_cache[key]
            return None
        return data

    def clear_expired_cache(self):
        now = _now_ms()
        expired = [k for k, (stored_at, _) in self._grammar_cache.items()
                   if now - stored_at > self.cache_timeout_ms]
        for key in expired:
            del self._grammar_cache[key]
        return len(expired)

    def cache_stats(self):
        return {
            'grammarEntries': len(self._grammar_cache),
            'languagesCached': self._languages is not None,
        }

    def _request(self, method, path, **kwargs):
        url = f'{self.base_url}{path}'
        try:
            resp = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            raise LanguageToolError('LanguageTool API request timed out.', 408)
        except requests.exceptions.RequestException as e:
            raise LanguageToolError(f'Network error or LanguageTool API is unreachable: {e}', 503)

        if resp.status_code != 200:
            try:
                details = resp.json()
            except ValueError:
                details = resp.text
            raise LanguageToolError(f'LanguageTool API error {resp.status_code}', resp.status_code, details)

        try:
            return resp.json()
        except ValueError:
            raise LanguageToolError('LanguageTool returned invalid JSON.', 502)

    def check_grammar(self, text, language='auto'):
        key = self._cache_key(text, language)
        cached = self._cached(key)
        if cached is not None:
            logger.debug('Grammar check served from cache')
            return cached

        data = self._request('POST', '/check', data={'text': text, 'language': language},
                             headers={'Accept': 'application/json'})
        if 'matches' not in data:
            raise LanguageToolError('Response did not contain "matches".', 500, data)

        self._grammar_cache[key] = (_now_ms(), data)
        return data

    def detect_language(self, text):
        data = self.check_grammar(text, 'auto')
        code = ((data.get('language') or {}).get('detectedLanguage') or {}).get('code')
        if not code or not isinstance(code, str):
            raise LanguageToolError('No valid detected language returned by LanguageTool.', 500)
        return code

    def get_languages(self):
        now = _now_ms()
        if self._languages is not None and now - self._languages_fetched_at < self.languages_cache_timeout_ms:
            return self._languages
        self._languages = self._request('GET', '/languages')
        self._languages_fetched_at = now
        return self._languages
