from __future__ import annotations
from typing import Optional


class ApiError(Exception):
    """Non-2xx response. ``str(err)`` is ``"<status>: <body-or-reason>"``."""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail or ''
        super().__init__(f'{status_code}: {self.detail}')


class AccessDeniedError(ApiError):
    def __init__(self, detail: str = 'Access Denied'):
        super().__init__(403, detail)


__all__ = ['ApiError', 'AccessDeniedError']
