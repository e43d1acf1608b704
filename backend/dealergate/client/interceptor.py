"""RBAC-aware request client.

Every outbound data request goes through ``RBACApiClient.request``:

  GET       query string gets the user's data constraints merged in, and is retried
            with backoff on transient failures.
  mutating  carries the cached CSRF token; a 403 refreshes the token and retries once.
  response  403 raises AccessDeniedError after one "Access Denied" notice; other
            non-2xx raise ApiError; JSON bodies go through the field redactor.

The domain driving filters and redaction is passed explicitly per call
(see ``dealergate.client.domains.infer_domain`` for path-based guessing).
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

import httpx

from dealergate.config.settings import ClientSettings
from dealergate.models.rbac import UserContext
from dealergate.services.capabilities import apply_rbac_filters
from dealergate.services.notifications import Notifier, VARIANT_DESTRUCTIVE
from dealergate.services.policy import RBACService
from dealergate.client.csrf import CsrfTokenCache
from dealergate.client.errors import AccessDeniedError, ApiError
from dealergate.client.retry import RetryPolicy

logger = logging.getLogger(__name__)

MUTATING_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')
CSRF_HEADER = 'x-csrf-token'
TENANT_HEADER = 'x-tenant-id'
DEMO_AUTH_HEADER = 'X-Demo-Auth'


def encode_query_params(params: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Flatten params into query pairs. Lists and ``{'$in': [...]}`` become repeated keys.

    An empty ``$in`` set is sent as a blank value (``territory=``) so the server sees a
    constraint that matches nothing instead of no constraint at all.
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, dict) and '$in' in value:
            value = list(value['$in'])
            if not value:
                pairs.append((key, ''))
                continue
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            if isinstance(v, bool):
                v = 'true' if v else 'false'
            pairs.append((key, str(v)))
    return pairs


def merge_query(url: str, extra: Dict[str, Any]) -> str:
    base, _, query = url.partition('?')
    params: Dict[str, Any] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, []).append(value)
    params = {k: (v[0] if len(v) == 1 else v) for k, v in params.items()}
    params.update(extra)
    encoded = urlencode(encode_query_params(params))
    return f'{base}?{encoded}' if encoded else base


class RBACApiClient:
    def __init__(
        self,
        user_context: Optional[UserContext] = None,
        settings: Optional[ClientSettings] = None,
        *,
        notifier: Optional[Notifier] = None,
        transport: Optional[httpx.BaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        self.settings = settings or ClientSettings.from_env()
        self.notifier = notifier or Notifier()
        self.retry = retry or RetryPolicy(
            max_retries=self.settings.read_retries,
            base_delay=self.settings.retry_base_delay,
            max_delay=self.settings.retry_max_delay,
        )
        self.rbac: Optional[RBACService] = None
        self.set_user_context(user_context)
        self._http = httpx.Client(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
            transport=transport,
            headers=headers,
        )
        self.csrf = CsrfTokenCache(self._http)

    def set_user_context(self, user_context: Optional[UserContext]):
        """Swap the acting user wholesale (role switch / demo impersonation)."""
        self.rbac = RBACService(user_context) if user_context is not None else None

    @property
    def user_context(self) -> Optional[UserContext]:
        return self.rbac.user_context if self.rbac else None

    def _base_headers(self, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if extra:
            headers.update(extra)
        if self.settings.demo_authenticated:
            headers[DEMO_AUTH_HEADER] = 'true'
        headers[TENANT_HEADER] = self.settings.effective_tenant_id
        return headers

    def _filtered_url(self, url: str, domain: Optional[str]) -> str:
        extra = apply_rbac_filters(domain, {}, self.rbac)
        if not extra:
            return url
        filtered = merge_query(url, extra)
        logger.debug('rbac query %s -> %s', url, filtered)
        return filtered

    def filter_response(self, data: Any, domain: Optional[str]) -> Any:
        if self.rbac is None or not domain or data is None:
            return data
        if isinstance(data, list):
            return self.rbac.filter_sensitive_list(data, domain)
        return self.rbac.filter_sensitive_data(data, domain)

    def request(
        self,
        method: str,
        url: str,
        *,
        domain: Optional[str],
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        method = method.upper()
        if method in MUTATING_METHODS:
            return self._send(method, url, domain, json, headers)
        return self.retry.call(lambda: self._send(method, url, domain, json, headers))

    def _send(self, method: str, url: str, domain: Optional[str], body: Any, extra_headers: Optional[Dict[str, str]]):
        headers = self._base_headers(extra_headers)
        if method == 'GET' and self.rbac is not None:
            url = self._filtered_url(url, domain)
        mutating = method in MUTATING_METHODS
        if mutating and not any(k.lower() == CSRF_HEADER for k in headers):
            token = self.csrf.get()
            if token:
                headers[CSRF_HEADER] = token

        resp = self._http.request(method, url, headers=headers, json=body)

        if resp.status_code == 403 and mutating:
            logger.warning('%s %s rejected with 403; refreshing CSRF token', method, url)
            self.csrf.invalidate()
            token = self.csrf.get()
            if token:
                headers[CSRF_HEADER] = token
                resp = self._http.request(method, url, headers=headers, json=body)

        if resp.status_code == 403:
            self.notifier.notify(
                'Access Denied',
                "You don't have permission to access this resource.",
                VARIANT_DESTRUCTIVE,
            )
            raise AccessDeniedError()
        if not resp.is_success:
            raise ApiError(resp.status_code, resp.text or resp.reason_phrase)
        if not resp.content:
            return None
        try:
            data = resp.json()
        except ValueError:
            logger.warning('%s %s returned a non-JSON body', method, url)
            raise ApiError(resp.status_code, 'Invalid JSON response') from None
        return self.filter_response(data, domain)

    def get(self, url: str, *, domain: Optional[str], headers: Optional[Dict[str, str]] = None):
        return self.request('GET', url, domain=domain, headers=headers)

    def post(self, url: str, *, domain: Optional[str], json: Any = None, headers: Optional[Dict[str, str]] = None):
        return self.request('POST', url, domain=domain, json=json, headers=headers)

    def put(self, url: str, *, domain: Optional[str], json: Any = None, headers: Optional[Dict[str, str]] = None):
        return self.request('PUT', url, domain=domain, json=json, headers=headers)

    def patch(self, url: str, *, domain: Optional[str], json: Any = None, headers: Optional[Dict[str, str]] = None):
        return self.request('PATCH', url, domain=domain, json=json, headers=headers)

    def delete(self, url: str, *, domain: Optional[str], json: Any = None, headers: Optional[Dict[str, str]] = None):
        return self.request('DELETE', url, domain=domain, json=json, headers=headers)

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def create_rbac_client(user_context: Optional[UserContext], settings: Optional[ClientSettings] = None, **kwargs) -> RBACApiClient:
    """Build a request client bound to one user context (one per session)."""
    return RBACApiClient(user_context, settings, **kwargs)


__all__ = [
    'RBACApiClient', 'create_rbac_client', 'merge_query', 'encode_query_params',
    'MUTATING_METHODS', 'CSRF_HEADER', 'TENANT_HEADER', 'DEMO_AUTH_HEADER'
]
