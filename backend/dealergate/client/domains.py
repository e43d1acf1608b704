"""Data-domain names used to pick filter and redaction rules."""
from __future__ import annotations
from typing import Optional

SALES = 'sales'
SERVICE = 'service'
FINANCE = 'finance'
CUSTOMER = 'customer'

# Path fragment -> domain. First match wins, so '/sales' beats '/customer' in '/sales/customers'.
PATH_DOMAINS = (
    (('/sales',), SALES),
    (('/service',), SERVICE),
    (('/financial', '/payment'), FINANCE),
    (('/customer',), CUSTOMER),
)


def infer_domain(path: str) -> Optional[str]:
    """Guess the domain from an endpoint path; None when nothing matches.

    Prefer passing the domain explicitly; a renamed endpoint silently stops matching here.
    """
    path = path.split('?', 1)[0]
    for fragments, domain in PATH_DOMAINS:
        if any(f in path for f in fragments):
            return domain
    return None


__all__ = ['SALES', 'SERVICE', 'FINANCE', 'CUSTOMER', 'PATH_DOMAINS', 'infer_domain']
