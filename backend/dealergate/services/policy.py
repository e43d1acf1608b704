from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Mapping

from dealergate.models.rbac import UserContext, LEVEL_EXECUTIVE, LEVEL_MANAGER, LEVEL_REP
from dealergate.constants.roles import (
    ROLE_SALES_MANAGER, ROLE_SERVICE_MANAGER, ROLE_FINANCE_MANAGER,
)

logger = logging.getLogger(__name__)

# Fields stripped from records, keyed by (role level, domain).
SENSITIVE_FIELDS = {
    (LEVEL_REP, 'customer'): ('profitMargin', 'internalNotes', 'creditScore'),
    (LEVEL_REP, 'sales'): ('teamComparison', 'managerNotes'),
}
# Managers other than finance lose these on finance records.
FINANCE_MANAGER_ONLY_FIELDS = ('detailedFinancials', 'creditLimits')


class RBACService:
    """Permission checks, query constraints and field redaction for one UserContext."""

    def __init__(self, user_context: UserContext):
        self.user_context = user_context

    @property
    def role(self):
        return self.user_context.role

    def has_permission(self, resource: str, action: str) -> bool:
        for permission in self.role.permissions:
            if permission.matches(resource) and permission.allows(action):
                return True
        return False

    def get_data_filters(self, domain: str) -> Dict[str, Any]:
        ctx = self.user_context
        role = self.role
        filters: Dict[str, Any] = {}
        if role.level == LEVEL_EXECUTIVE:
            return filters
        if role.level == LEVEL_MANAGER:
            if domain == 'sales' and role.id == ROLE_SALES_MANAGER:
                filters['territory'] = {'$in': list(ctx.territory_ids)}
                filters['managerId'] = ctx.user_id
            elif domain == 'service' and role.id == ROLE_SERVICE_MANAGER:
                filters['territory'] = {'$in': list(ctx.territory_ids)}
                filters['assignedManagerId'] = ctx.user_id
            # finance managers see all financial data; any other manager/domain
            # pair falls through unrestricted
        elif role.level == LEVEL_REP:
            if domain == 'sales':
                filters['userId'] = ctx.user_id
            elif domain == 'service':
                filters['technicianId'] = ctx.user_id
        logger.debug('data filters role=%s domain=%s -> %s', role.id, domain, filters)
        return filters

    def get_allowed_territories(self) -> List[str]:
        """Empty list means every territory."""
        if self.user_context.is_executive:
            return []
        return list(self.user_context.territory_ids)

    def get_allowed_team_members(self) -> List[str]:
        """Empty list means every team member."""
        ctx = self.user_context
        if ctx.is_executive:
            return []
        if ctx.is_manager:
            return list(ctx.team_member_ids)
        return [ctx.user_id]

    def can_view_customer(self, customer_id: str) -> bool:
        # TODO: consult the customer-territory assignment once the API exposes it
        return self.user_context.is_executive or self.user_context.is_manager

    def sensitive_fields(self, domain: str) -> Iterable[str]:
        role = self.role
        if role.level == LEVEL_MANAGER and domain == 'finance' and role.id != ROLE_FINANCE_MANAGER:
            return FINANCE_MANAGER_ONLY_FIELDS
        return SENSITIVE_FIELDS.get((role.level, domain), ())

    def filter_sensitive_data(self, record: Any, domain: str) -> Any:
        if not isinstance(record, Mapping):
            return record
        filtered = dict(record)
        for name in self.sensitive_fields(domain):
            filtered.pop(name, None)
        return filtered

    def filter_sensitive_list(self, records: Iterable[Any], domain: str) -> List[Any]:
        return [self.filter_sensitive_data(r, domain) for r in records]


__all__ = ['RBACService', 'SENSITIVE_FIELDS', 'FINANCE_MANAGER_ONLY_FIELDS']
