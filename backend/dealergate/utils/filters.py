from __future__ import annotations
import logging
from typing import Any, Dict, Mapping
from flask import abort

logger = logging.getLogger(__name__)


def apply_filters(query, specs: Dict[str, Dict[str, Any]], params: Mapping[str, Any]):
    """Generic request-arg filter builder.

    specs: { param_name: { 'op': callable(query, value)->query, 'coerce': type/func, 'validate': callable(optional) } }
    """
    for name, meta in specs.items():
        if name not in params or params[name] is None:
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except (TypeError, ValueError):
                abort(400, description=f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            abort(400, description=f'{name} invalid')
        query = meta['op'](query, val)
    return query


def apply_data_filters(query, columns: Mapping[str, Any], constraints: Mapping[str, Any]):
    """Narrow a query by RBAC data constraints.

    columns: constraint name -> model column (``{'userId': SalesRecord.user_id}``)
    constraints: output of RBACService.get_data_filters; values are scalars or ``{'$in': [...]}``.
    An empty ``$in`` list matches nothing.
    """
    for name, value in constraints.items():
        col = columns.get(name)
        if col is None:
            logger.warning('no column mapped for data constraint %s; skipped', name)
            continue
        if isinstance(value, dict) and '$in' in value:
            query = query.filter(col.in_(list(value['$in'])))
        else:
            query = query.filter(col == value)
    return query
