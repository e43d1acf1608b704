from __future__ import annotations
import logging
from typing import Any, Iterable, Optional, Union

import httpx

from dealergate.client.errors import AccessDeniedError, ApiError
from dealergate.client.interceptor import RBACApiClient
from dealergate.services.notifications import VARIANT_DESTRUCTIVE

logger = logging.getLogger(__name__)

ON_403_THROW = 'throw'
ON_403_RETURN_NONE = 'return_none'


def query_key_to_url(query_key: Union[str, Iterable[Any]]) -> str:
    if isinstance(query_key, str):
        return query_key
    return '/'.join(str(part) for part in query_key)


class QueryRunner:
    """Reads and writes with user-facing error notices on top of RBACApiClient.

    on_403='return_none' lets screens render an empty state instead of failing when
    the role cannot see a resource.
    """

    def __init__(self, client: RBACApiClient, on_403: str = ON_403_THROW):
        if on_403 not in (ON_403_THROW, ON_403_RETURN_NONE):
            raise ValueError(f'on_403 must be {ON_403_THROW!r} or {ON_403_RETURN_NONE!r}')
        self.client = client
        self.on_403 = on_403

    @property
    def notifier(self):
        return self.client.notifier

    def fetch(self, query_key: Union[str, Iterable[Any]], *, domain: Optional[str]) -> Any:
        url = query_key_to_url(query_key)
        try:
            return self.client.get(url, domain=domain)
        except AccessDeniedError:
            if self.on_403 == ON_403_RETURN_NONE:
                logger.debug('access denied for %s, returning None', url)
                return None
            self.notifier.notify('Access Restricted', "You don't have permission to view this data.", VARIANT_DESTRUCTIVE)
            raise
        except (ApiError, httpx.TransportError) as e:
            self.notifier.notify('Load error', str(e) or 'Failed to load data', VARIANT_DESTRUCTIVE)
            raise

    def mutate(self, method: str, url: str, *, domain: Optional[str], json: Any = None) -> Any:
        try:
            return self.client.request(method, url, domain=domain, json=json)
        except AccessDeniedError:
            self.notifier.notify('Action Not Permitted', "You don't have permission to perform this action.", VARIANT_DESTRUCTIVE)
            raise
        except (ApiError, httpx.TransportError) as e:
            self.notifier.notify('Action failed', str(e) or 'Action failed', VARIANT_DESTRUCTIVE)
            raise


__all__ = ['QueryRunner', 'query_key_to_url', 'ON_403_THROW', 'ON_403_RETURN_NONE']
