from __future__ import annotations
import logging
import threading
from typing import Optional

import httpx

from dealergate.config.settings import CSRF_TOKEN_PATH

logger = logging.getLogger(__name__)

TOKEN_FIELDS = ('csrfToken', 'token', 'csrf')


class CsrfTokenCache:
    """Anti-forgery token fetched on first use and kept until invalidated.

    The token itself is unlocked: two callers racing on an empty cache may both fetch,
    and the last token written wins. Only ``fetch_count`` is guarded, so it is exact.
    """

    def __init__(self, http: httpx.Client, path: str = CSRF_TOKEN_PATH):
        self._http = http
        self.path = path
        self._token: Optional[str] = None
        self.fetch_count = 0
        self._count_lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        return self._token

    def get(self) -> Optional[str]:
        if self._token:
            return self._token
        with self._count_lock:
            self.fetch_count += 1
        try:
            resp = self._http.get(self.path)
        except httpx.HTTPError as e:
            logger.warning('CSRF token fetch failed: %s', e)
            return None
        if not resp.is_success:
            logger.warning('CSRF token fetch returned %s', resp.status_code)
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.warning('CSRF token response is not JSON')
            return None
        if isinstance(data, dict):
            self._token = next((data[f] for f in TOKEN_FIELDS if data.get(f)), None)
        return self._token

    def invalidate(self):
        self._token = None


__all__ = ['CsrfTokenCache', 'TOKEN_FIELDS']
