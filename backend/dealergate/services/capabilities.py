from __future__ import annotations
from typing import Any, Dict, Mapping, Optional

from dealergate.services.policy import RBACService


def can_access_sales_reports(rbac: RBACService) -> bool:
    return rbac.has_permission('reports:sales', 'read')


def can_access_service_reports(rbac: RBACService) -> bool:
    return rbac.has_permission('reports:service', 'read')


def can_access_financial_reports(rbac: RBACService) -> bool:
    return rbac.has_permission('reports:finance', 'read')


def can_access_executive_reports(rbac: RBACService) -> bool:
    return rbac.has_permission('reports:executive', 'read')


def get_reporting_capabilities(rbac: RBACService) -> Dict[str, Any]:
    return {
        'canViewSalesReports': can_access_sales_reports(rbac),
        'canViewServiceReports': can_access_service_reports(rbac),
        'canViewFinancialReports': can_access_financial_reports(rbac),
        'canViewExecutiveReports': can_access_executive_reports(rbac),
        'canExportReports': rbac.has_permission('reports:*', 'export'),
        'canManageReports': rbac.has_permission('reports:*', 'create'),
        'allowedTerritories': rbac.get_allowed_territories(),
        'allowedTeamMembers': rbac.get_allowed_team_members(),
    }


def apply_rbac_filters(domain: Optional[str], params: Mapping[str, Any], rbac: RBACService) -> Dict[str, Any]:
    """Return a copy of ``params`` with the domain constraints and territory restriction merged in."""
    filtered = dict(params)
    if domain:
        filtered.update(rbac.get_data_filters(domain))
    territories = rbac.get_allowed_territories()
    if territories:
        filtered['territories'] = territories
    return filtered


# Endpoint fragment -> report resource guarding it. First match wins.
ENDPOINT_RESOURCES = (
    (('/sales',), 'reports:sales'),
    (('/service',), 'reports:service'),
    (('/financial', '/payment'), 'reports:finance'),
    (('/executive',), 'reports:executive'),
)


def can_access_endpoint(rbac: Optional[RBACService], endpoint: str) -> bool:
    """Navigation hint only. Unknown endpoints, or no RBAC context at all, are allowed."""
    if rbac is None:
        return True
    for fragments, resource in ENDPOINT_RESOURCES:
        if any(f in endpoint for f in fragments):
            return rbac.has_permission(resource, 'read')
    return True


__all__ = [
    'can_access_sales_reports', 'can_access_service_reports', 'can_access_financial_reports',
    'can_access_executive_reports', 'get_reporting_capabilities', 'apply_rbac_filters',
    'can_access_endpoint', 'ENDPOINT_RESOURCES'
]
