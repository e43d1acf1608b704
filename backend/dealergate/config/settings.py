from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TENANT_ID = '550e8400-e29b-41d4-a716-446655440000'
DEFAULT_BASE_URL = 'http://localhost:5000'
CSRF_TOKEN_PATH = '/api/csrf-token'


def _flag(raw: Optional[str]) -> bool:
    return (raw or '').strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class ClientSettings:
    base_url: str = DEFAULT_BASE_URL
    tenant_id: Optional[str] = None
    demo_authenticated: bool = False
    timeout: float = 30.0
    read_retries: int = 2
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0

    @property
    def effective_tenant_id(self) -> str:
        return self.tenant_id or DEFAULT_TENANT_ID

    @classmethod
    def from_env(cls) -> 'ClientSettings':
        return cls(
            base_url=os.getenv('DEALERGATE_BASE_URL', DEFAULT_BASE_URL),
            tenant_id=os.getenv('DEALERGATE_TENANT_ID') or None,
            demo_authenticated=_flag(os.getenv('DEALERGATE_DEMO_AUTH')),
            timeout=float(os.getenv('DEALERGATE_TIMEOUT', '30')),
            read_retries=int(os.getenv('DEALERGATE_READ_RETRIES', '2')),
            retry_base_delay=float(os.getenv('DEALERGATE_RETRY_BASE_DELAY', '1.0')),
            retry_max_delay=float(os.getenv('DEALERGATE_RETRY_MAX_DELAY', '10.0')),
        )
