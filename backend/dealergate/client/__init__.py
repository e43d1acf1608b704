from .errors import ApiError, AccessDeniedError
from .domains import SALES, SERVICE, FINANCE, CUSTOMER, infer_domain
from .csrf import CsrfTokenCache
from .retry import RetryPolicy
from .interceptor import RBACApiClient, create_rbac_client
from .query import QueryRunner

__all__ = [
    'ApiError', 'AccessDeniedError', 'SALES', 'SERVICE', 'FINANCE', 'CUSTOMER', 'infer_domain',
    'CsrfTokenCache', 'RetryPolicy', 'RBACApiClient', 'create_rbac_client', 'QueryRunner'
]
