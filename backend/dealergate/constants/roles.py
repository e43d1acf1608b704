"""Reporting role presets and demo user contexts.
Role ids are referenced by the data filter and redactor; never rename one silently.
"""
from __future__ import annotations
from typing import Dict, Mapping, Any

from dealergate.models.rbac import (
    Role, UserContext, permissions_from_dicts,
    LEVEL_EXECUTIVE, LEVEL_MANAGER, LEVEL_REP, LEVEL_ADMIN,
)

ROLE_EXECUTIVE = 'executive'
ROLE_SALES_MANAGER = 'sales_manager'
ROLE_SERVICE_MANAGER = 'service_manager'
ROLE_FINANCE_MANAGER = 'finance_manager'
ROLE_SALES_REP = 'sales_rep'
ROLE_TECHNICIAN = 'technician'
ROLE_ADMIN = 'admin'

DOMAINS = ['sales', 'service', 'finance', 'customer']

ROLE_PRESETS: Dict[str, dict] = {
    ROLE_EXECUTIVE: {
        'name': 'Executive',
        'description': 'C-level executives with full access to all reports',
        'level': LEVEL_EXECUTIVE,
        'permissions': [
            {'resource': 'reports:sales', 'actions': ['read', 'export']},
            {'resource': 'reports:service', 'actions': ['read', 'export']},
            {'resource': 'reports:finance', 'actions': ['read', 'export']},
            {'resource': 'reports:executive', 'actions': ['read', 'export']},
            {'resource': 'data:all', 'actions': ['read']},
            {'resource': 'analytics:advanced', 'actions': ['read']},
        ],
    },
    ROLE_SALES_MANAGER: {
        'name': 'Sales Manager',
        'description': 'Sales team managers with access to team performance data',
        'level': LEVEL_MANAGER,
        'permissions': [
            {'resource': 'reports:sales', 'actions': ['read', 'export']},
            {'resource': 'reports:executive', 'actions': ['read'], 'conditions': {'scope': 'sales'}},
            {'resource': 'data:sales', 'actions': ['read'], 'conditions': {'scope': 'team'}},
            {'resource': 'analytics:coaching', 'actions': ['read']},
        ],
    },
    ROLE_SERVICE_MANAGER: {
        'name': 'Service Manager',
        'description': 'Service team managers with access to operational metrics',
        'level': LEVEL_MANAGER,
        'permissions': [
            {'resource': 'reports:service', 'actions': ['read', 'export']},
            {'resource': 'reports:executive', 'actions': ['read'], 'conditions': {'scope': 'service'}},
            {'resource': 'data:service', 'actions': ['read'], 'conditions': {'scope': 'team'}},
            {'resource': 'analytics:forecasting', 'actions': ['read']},
        ],
    },
    ROLE_FINANCE_MANAGER: {
        'name': 'Finance Manager',
        'description': 'Finance team with access to financial and payment data',
        'level': LEVEL_MANAGER,
        'permissions': [
            {'resource': 'reports:finance', 'actions': ['read', 'export']},
            {'resource': 'reports:executive', 'actions': ['read'], 'conditions': {'scope': 'finance'}},
            {'resource': 'data:financial', 'actions': ['read']},
            {'resource': 'data:customers', 'actions': ['read'], 'conditions': {'fields': ['financial']}},
        ],
    },
    ROLE_SALES_REP: {
        'name': 'Sales Representative',
        'description': 'Individual sales reps with access to personal metrics',
        'level': LEVEL_REP,
        'permissions': [
            {'resource': 'reports:sales', 'actions': ['read'], 'conditions': {'scope': 'self'}},
            {'resource': 'data:sales', 'actions': ['read'], 'conditions': {'scope': 'self'}},
            {'resource': 'data:customers', 'actions': ['read'], 'conditions': {'scope': 'assigned'}},
        ],
    },
    ROLE_TECHNICIAN: {
        'name': 'Technician',
        'description': 'Service technicians with access to personal metrics',
        'level': LEVEL_REP,
        'permissions': [
            {'resource': 'reports:service', 'actions': ['read'], 'conditions': {'scope': 'self'}},
            {'resource': 'data:service', 'actions': ['read'], 'conditions': {'scope': 'assigned'}},
            {'resource': 'data:customers', 'actions': ['read'], 'conditions': {'scope': 'assigned'}},
        ],
    },
    ROLE_ADMIN: {
        'name': 'System Administrator',
        'description': 'Full system access for configuration and maintenance',
        'level': LEVEL_ADMIN,
        'permissions': [
            {'resource': 'reports:*', 'actions': ['read', 'export', 'create', 'update', 'delete']},
            {'resource': 'data:*', 'actions': ['read', 'write']},
            {'resource': 'analytics:*', 'actions': ['read']},
            {'resource': 'system:*', 'actions': ['read', 'write', 'configure']},
        ],
    },
}


class UnknownRoleError(KeyError):
    pass


def build_role(role_id: str) -> Role:
    try:
        preset = ROLE_PRESETS[role_id]
    except KeyError:
        raise UnknownRoleError(role_id) from None
    return Role(
        id=role_id,
        name=preset['name'],
        level=preset['level'],
        permissions=permissions_from_dicts(preset['permissions']),
        description=preset['description'],
    )


REPORTING_ROLES: Dict[str, Role] = {role_id: build_role(role_id) for role_id in ROLE_PRESETS}


def context_from_claims(claims: Mapping[str, Any]) -> UserContext:
    """Build a UserContext from a flat profile / JWT claims mapping."""
    role_id = claims.get('role_id')
    if role_id not in REPORTING_ROLES:
        raise UnknownRoleError(role_id)
    return UserContext(
        user_id=str(claims.get('user_id') or claims.get('sub') or ''),
        role=REPORTING_ROLES[role_id],
        territory_ids=claims.get('territory_ids') or (),
        team_member_ids=claims.get('team_member_ids') or (),
        manager_id=claims.get('manager_id'),
        departments=claims.get('departments') or (),
    )


DEMO_USER_CONTEXTS: Dict[str, UserContext] = {
    'executive': UserContext(
        user_id='exec-001',
        role=REPORTING_ROLES[ROLE_EXECUTIVE],
        departments=('sales', 'service', 'finance'),
    ),
    'salesManager': UserContext(
        user_id='mgr-001',
        role=REPORTING_ROLES[ROLE_SALES_MANAGER],
        territory_ids=('north', 'east'),
        team_member_ids=('rep-001', 'rep-002', 'rep-003'),
        departments=('sales',),
    ),
    'salesRep': UserContext(
        user_id='rep-001',
        role=REPORTING_ROLES[ROLE_SALES_REP],
        territory_ids=('north',),
        manager_id='mgr-001',
        departments=('sales',),
    ),
}
