from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

LEVEL_EXECUTIVE = 'executive'
LEVEL_MANAGER = 'manager'
LEVEL_REP = 'rep'
LEVEL_ADMIN = 'admin'
ALL_LEVELS = (LEVEL_EXECUTIVE, LEVEL_MANAGER, LEVEL_REP, LEVEL_ADMIN)

WILDCARD = '*'


@dataclass(frozen=True)
class Permission:
    """A resource such as ``reports:sales`` (or ``reports:*``) and the actions allowed on it.

    ``conditions`` holds free-form scoping hints (``{'scope': 'team'}``); nothing in the
    evaluator interprets them.
    """
    resource: str
    actions: Tuple[str, ...]
    conditions: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        # accept lists from presets / claims but store immutably
        object.__setattr__(self, 'actions', tuple(self.actions))

    @property
    def domain(self) -> str:
        # everything before the last segment: 'reports:sales:*' -> 'reports:sales'
        return self.resource.rsplit(':', 1)[0]

    @property
    def is_wildcard(self) -> bool:
        return self.resource.endswith(':' + WILDCARD)

    def matches(self, resource: str) -> bool:
        if self.resource == resource:
            return True
        if self.is_wildcard:
            return resource.startswith(self.domain + ':')
        return False

    def allows(self, action: str) -> bool:
        return action in self.actions or WILDCARD in self.actions


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    level: str
    permissions: Tuple[Permission, ...] = ()
    description: str = ''

    def __post_init__(self):
        if self.level not in ALL_LEVELS:
            raise ValueError(f'unknown role level {self.level!r}')
        object.__setattr__(self, 'permissions', tuple(self.permissions))


@dataclass(frozen=True)
class UserContext:
    """Acting user for one session. Build a new one on role switch; never mutate."""
    user_id: str
    role: Role
    territory_ids: Tuple[str, ...] = ()
    team_member_ids: Tuple[str, ...] = ()
    manager_id: Optional[str] = None
    departments: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'territory_ids', tuple(self.territory_ids))
        object.__setattr__(self, 'team_member_ids', tuple(self.team_member_ids))
        object.__setattr__(self, 'departments', tuple(self.departments))

    @property
    def role_id(self) -> str:
        return self.role.id

    @property
    def is_executive(self) -> bool:
        return self.role.level == LEVEL_EXECUTIVE

    @property
    def is_manager(self) -> bool:
        # executives supervise too
        return self.role.level in (LEVEL_EXECUTIVE, LEVEL_MANAGER)

    def to_claims(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'role_id': self.role.id,
            'territory_ids': list(self.territory_ids),
            'team_member_ids': list(self.team_member_ids),
            'manager_id': self.manager_id,
            'departments': list(self.departments),
        }


def permissions_from_dicts(items: List[Dict[str, Any]]) -> Tuple[Permission, ...]:
    return tuple(
        Permission(resource=p['resource'], actions=tuple(p.get('actions', ())), conditions=dict(p.get('conditions') or {}))
        for p in items
    )

__all__ = [
    'LEVEL_EXECUTIVE', 'LEVEL_MANAGER', 'LEVEL_REP', 'LEVEL_ADMIN', 'ALL_LEVELS', 'WILDCARD',
    'Permission', 'Role', 'UserContext', 'permissions_from_dicts'
]
