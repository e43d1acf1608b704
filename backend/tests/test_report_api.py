from collections import deque

from dealergate.constants.roles import DEMO_USER_CONTEXTS, REPORTING_ROLES
from dealergate.models.rbac import UserContext

ADMIN = UserContext('admin-001', REPORTING_ROLES['admin'])
TECH = UserContext('tech-001', REPORTING_ROLES['technician'])
FINANCE = UserContext('fin-001', REPORTING_ROLES['finance_manager'])


def _csrf(client):
    return client.get('/api/csrf-token').get_json()['csrfToken']


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}


def test_requires_token(client, seeded):
    r = client.get('/api/sales-reps')
    assert r.status_code == 401


def test_demo_login_issues_usable_token(client, seeded):
    r = client.post('/api/auth/demo-login', json={'context': 'salesRep'})
    assert r.status_code == 200
    body = r.get_json()
    assert body['role'] == 'sales_rep'
    rows = client.get('/api/sales-reps', headers={'Authorization': f"Bearer {body['access_token']}"}).get_json()
    assert [row['userId'] for row in rows] == ['rep-001']


def test_demo_login_unknown_context(client):
    r = client.post('/api/auth/demo-login', json={'context': 'ceo'})
    assert r.status_code == 400
    err = r.get_json()['error']
    assert err['status'] == 400 and 'context must be one of' in err['detail']


def test_sales_rep_sees_only_own_rows_redacted(client, seeded, bearer):
    r = client.get('/api/sales-reps', headers=bearer(DEMO_USER_CONTEXTS['salesRep']))
    assert r.status_code == 200
    rows = r.get_json()
    assert len(rows) == 1 and rows[0]['userId'] == 'rep-001'
    assert 'teamComparison' not in rows[0] and 'managerNotes' not in rows[0]
    assert r.headers['X-Total-Count'] == '1'


def test_sales_manager_sees_team_in_territories(client, seeded, bearer):
    rows = client.get('/api/sales-reps', headers=bearer(DEMO_USER_CONTEXTS['salesManager'])).get_json()
    assert sorted(row['userId'] for row in rows) == ['rep-001', 'rep-002']
    assert all('managerNotes' in row for row in rows)


def test_executive_sees_everything(client, seeded, bearer):
    h = bearer(DEMO_USER_CONTEXTS['executive'])
    assert len(client.get('/api/sales-reps', headers=h).get_json()) == 3
    customers = client.get('/api/customers', headers=h).get_json()
    assert len(customers) == 2
    assert customers[0]['creditScore'] == 700


def test_request_filters_and_pagination(client, seeded, bearer):
    h = bearer(DEMO_USER_CONTEXTS['executive'])
    east = client.get('/api/sales-reps?territory=east', headers=h).get_json()
    assert [row['customerName'] for row in east] == ['Beta']
    r = client.get('/api/sales-reps?limit=1&offset=1', headers=h)
    assert len(r.get_json()) == 1
    assert r.headers['X-Total-Count'] == '3'
    bad = client.get('/api/sales-reps?limit=abc', headers=h)
    assert bad.status_code == 400
    assert bad.get_json()['error']['detail'] == 'limit/offset must be int'


def test_rep_denied_service_reports(client, seeded, bearer):
    r = client.get('/api/service-tickets', headers=bearer(DEMO_USER_CONTEXTS['salesRep']))
    assert r.status_code == 403
    assert r.get_json()['error']['detail'] == 'Missing permission'


def test_technician_sees_own_tickets(client, seeded, bearer):
    rows = client.get('/api/service-tickets', headers=bearer(TECH)).get_json()
    assert [row['technicianId'] for row in rows] == ['tech-001']
    assert len(client.get('/api/service-tickets?status=OPEN', headers=bearer(TECH)).get_json()) == 1
    invalid = client.get('/api/service-tickets?status=BOGUS', headers=bearer(TECH))
    assert invalid.status_code == 400
    assert invalid.get_json()['error']['detail'] == 'status invalid'


def test_rep_customers_scoped_and_redacted(client, seeded, bearer):
    rows = client.get('/api/customers', headers=bearer(DEMO_USER_CONTEXTS['salesRep'])).get_json()
    assert [row['name'] for row in rows] == ['Acme']
    assert not {'creditScore', 'profitMargin', 'internalNotes'} & set(rows[0])


def test_finance_payments(client, seeded, bearer):
    rows = client.get('/api/financial/payments', headers=bearer(FINANCE)).get_json()
    assert rows[0]['detailedFinancials'] == {'terms': 'NET30'}
    denied = client.get('/api/financial/payments', headers=bearer(DEMO_USER_CONTEXTS['salesManager']))
    assert denied.status_code == 403


def test_create_customer_requires_csrf(client, seeded, bearer):
    h = bearer(ADMIN)
    r = client.post('/api/customers', json={'name': 'Zeta', 'territory': 'west'}, headers=h)
    assert r.status_code == 403
    assert r.get_json()['error']['detail'] == 'CSRF token invalid'
    r = client.post('/api/customers', json={'name': 'Zeta', 'territory': 'west', 'creditScore': '640'},
                    headers={**h, 'x-csrf-token': _csrf(client)})
    assert r.status_code == 201
    body = r.get_json()
    assert body['ownerId'] == 'admin-001' and body['creditScore'] == 640


def test_create_customer_validation(client, seeded, bearer):
    h = {**bearer(ADMIN), 'x-csrf-token': _csrf(client)}
    assert client.post('/api/customers', json={'name': 'NoTerritory'}, headers=h).status_code == 400
    r = client.post('/api/customers', json={'name': 'X', 'territory': 'w', 'profitMargin': 'high'}, headers=h)
    assert r.status_code == 400
    assert r.get_json()['error']['detail'] == 'profitMargin must be int'


def test_rep_cannot_write_customers(client, seeded, bearer):
    h = {**bearer(DEMO_USER_CONTEXTS['salesRep']), 'x-csrf-token': _csrf(client)}
    r = client.post('/api/customers', json={'name': 'Zeta', 'territory': 'north'}, headers=h)
    assert r.status_code == 403
    assert r.get_json()['error']['detail'] == 'Missing permission'


def test_delete_customer(client, seeded, bearer):
    h = {**bearer(ADMIN), 'x-csrf-token': _csrf(client)}
    ids = [c['id'] for c in client.get('/api/customers', headers=h).get_json()]
    assert client.delete(f'/api/customers/{ids[0]}', headers=h).get_json() == {'deleted': ids[0]}
    assert client.delete(f'/api/customers/{ids[0]}', headers=h).status_code == 404


def test_unknown_role_claim_rejected(client, seeded, app_instance):
    from flask_jwt_extended import create_access_token
    with app_instance.app_context():
        token = create_access_token(identity='x', additional_claims={'user_id': 'x', 'role_id': 'janitor'})
    r = client.get('/api/sales-reps', headers={'Authorization': f'Bearer {token}'})
    assert r.status_code == 403
    assert r.get_json()['error']['detail'] == 'Unknown role'


def test_blank_territory_matches_nothing(client, seeded, bearer):
    rows = client.get('/api/sales-reps?territory=', headers=bearer(DEMO_USER_CONTEXTS['executive'])).get_json()
    assert rows == []


def test_issued_csrf_tokens_are_bounded(client, seeded, bearer, app_instance, monkeypatch):
    assert app_instance.extensions['csrf_tokens'].maxlen == app_instance.config['CSRF_TOKEN_LIMIT']
    monkeypatch.setitem(app_instance.extensions, 'csrf_tokens', deque(maxlen=2))
    oldest, *newer = [_csrf(client) for _ in range(3)]
    assert list(app_instance.extensions['csrf_tokens']) == newer
    h = bearer(ADMIN)
    r = client.post('/api/customers', json={'name': 'Zeta', 'territory': 'west'}, headers={**h, 'x-csrf-token': oldest})
    assert r.status_code == 403
    r = client.post('/api/customers', json={'name': 'Zeta', 'territory': 'west'}, headers={**h, 'x-csrf-token': newer[-1]})
    assert r.status_code == 201
