from __future__ import annotations
import secrets
from flask import Blueprint, request, abort, jsonify, current_app
from flask_jwt_extended import create_access_token
from sqlalchemy import select
from dealergate import get_db
from dealergate.config.pagination import normalize_pagination
from dealergate.constants.roles import DEMO_USER_CONTEXTS
from dealergate.decorators.auth import require_report_permission, require_csrf, current_rbac
from dealergate.models.records import SalesRecord, ServiceTicket, Customer, Payment
from dealergate.utils.filters import apply_filters, apply_data_filters

api_bp = Blueprint('api', __name__)

# constraint name -> column, per model
SALES_COLUMNS = {
    'userId': SalesRecord.user_id,
    'managerId': SalesRecord.manager_id,
    'territory': SalesRecord.territory,
}
SERVICE_COLUMNS = {
    'technicianId': ServiceTicket.technician_id,
    'assignedManagerId': ServiceTicket.assigned_manager_id,
    'territory': ServiceTicket.territory,
}
CUSTOMER_COLUMNS = {
    'ownerId': Customer.owner_id,
    'territory': Customer.territory,
}
PAYMENT_COLUMNS = {
    'territory': Payment.territory,
}


@api_bp.get('/csrf-token')
def csrf_token():
    token = secrets.token_urlsafe(24)
    current_app.extensions['csrf_tokens'].append(token)
    return {'csrfToken': token}


@api_bp.post('/auth/demo-login')
def demo_login():
    """Issue a JWT for one of the demo user contexts (demo mode only)."""
    data = request.json or {}
    ctx = DEMO_USER_CONTEXTS.get(data.get('context'))
    if ctx is None:
        abort(400, description=f"context must be one of {sorted(DEMO_USER_CONTEXTS)}")
    token = create_access_token(identity=ctx.user_id, additional_claims=ctx.to_claims())
    return {'access_token': token, 'role': ctx.role_id}


def _list_scoped(model, domain: str, columns, filter_specs):
    """Query ``model`` under the caller's data constraints and return a redacted JSON array."""
    rbac = current_rbac()
    session = get_db()
    q = session.query(model)
    q = apply_data_filters(q, columns, rbac.get_data_filters(domain))
    territories = rbac.get_allowed_territories()
    if territories:
        q = q.filter(model.territory.in_(territories))
    q = apply_filters(q, filter_specs, request.args)
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.count()
    rows = q.order_by(model.id.asc()).offset(offset).limit(limit).all()
    data = rbac.filter_sensitive_list([r.to_json() for r in rows], domain)
    resp = jsonify(data)
    resp.headers['X-Total-Count'] = str(total)
    return resp


@api_bp.get('/sales-reps')
@require_report_permission(('reports:sales', 'read'))
def list_sales_records():
    return _list_scoped(SalesRecord, 'sales', SALES_COLUMNS, {
        'territory': {'op': lambda qu, v: qu.filter(SalesRecord.territory == v)},
    })


@api_bp.get('/service-tickets')
@require_report_permission(('reports:service', 'read'))
def list_service_tickets():
    return _list_scoped(ServiceTicket, 'service', SERVICE_COLUMNS, {
        'territory': {'op': lambda qu, v: qu.filter(ServiceTicket.territory == v)},
        'status': {'op': lambda qu, v: qu.filter(ServiceTicket.status == v), 'validate': lambda v: v in ServiceTicket.ALL_STATUSES},
    })


@api_bp.get('/customers')
@require_report_permission(('data:customers', 'read'), ('data:all', 'read'))
def list_customers():
    return _list_scoped(Customer, 'customer', CUSTOMER_COLUMNS, {
        'territory': {'op': lambda qu, v: qu.filter(Customer.territory == v)},
        'name': {'op': lambda qu, v: qu.filter(Customer.name.ilike(f'%{v}%'))},
    })


@api_bp.get('/financial/payments')
@require_report_permission(('reports:finance', 'read'))
def list_payments():
    return _list_scoped(Payment, 'finance', PAYMENT_COLUMNS, {
        'territory': {'op': lambda qu, v: qu.filter(Payment.territory == v)},
    })


@api_bp.post('/customers')
@require_csrf
@require_report_permission(('data:customers', 'write'))
def create_customer():
    data = request.json or {}
    name = data.get('name')
    territory = data.get('territory')
    if not name or not territory:
        abort(400, description='name and territory required')
    ints = {}
    for key in ('profitMargin', 'creditScore'):
        if data.get(key) is None:
            continue
        try:
            ints[key] = int(data[key])
        except (TypeError, ValueError):
            abort(400, description=f'{key} must be int')
    c = Customer(
        name=name,
        territory=territory,
        owner_id=data.get('ownerId') or current_rbac().user_context.user_id,
        profit_margin=ints.get('profitMargin'),
        credit_score=ints.get('creditScore'),
        internal_notes=data.get('internalNotes'),
    )
    session = get_db()
    session.add(c)
    session.commit()
    current_app.logger.info('customer %s created by %s', c.id, current_rbac().user_context.user_id)
    return c.to_json(), 201


@api_bp.delete('/customers/<int:customer_id>')
@require_csrf
@require_report_permission(('data:customers', 'write'))
def delete_customer(customer_id: int):
    session = get_db()
    c = session.execute(select(Customer).where(Customer.id == customer_id)).scalar_one_or_none()
    if not c:
        abort(404)
    session.delete(c)
    session.commit()
    return {'deleted': customer_id}
