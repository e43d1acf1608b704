"""RBACApiClient driven against the Flask app in-process through httpx's WSGI transport."""
import pytest

from dealergate.client import RBACApiClient, QueryRunner, AccessDeniedError, infer_domain
from dealergate.client.query import ON_403_RETURN_NONE
from dealergate.constants.roles import DEMO_USER_CONTEXTS, REPORTING_ROLES
from dealergate.models.rbac import UserContext

ADMIN = UserContext('admin-001', REPORTING_ROLES['admin'])


@pytest.fixture()
def make_client(fast_settings, wsgi_transport, bearer, no_sleep_retry):
    clients = []

    def _make(ctx):
        c = RBACApiClient(ctx, fast_settings, transport=wsgi_transport, headers=bearer(ctx), retry=no_sleep_retry)
        clients.append(c)
        return c
    yield _make
    for c in clients:
        c.close()


def test_rep_report_query(seeded, make_client):
    client = make_client(DEMO_USER_CONTEXTS['salesRep'])
    url = '/api/sales-reps?active=true'
    rows = client.get(url, domain=infer_domain(url))
    assert [r['userId'] for r in rows] == ['rep-001']
    assert 'managerNotes' not in rows[0]


def test_rep_customers_lose_sensitive_fields(seeded, make_client):
    rows = make_client(DEMO_USER_CONTEXTS['salesRep']).get('/api/customers', domain='customer')
    assert rows and all('creditScore' not in r for r in rows)


def test_admin_create_and_delete_fetches_csrf_once(seeded, make_client):
    client = make_client(ADMIN)
    created = client.post('/api/customers', domain='customer', json={'name': 'Zeta', 'territory': 'west'})
    assert created['name'] == 'Zeta'
    assert client.delete(f"/api/customers/{created['id']}", domain='customer') == {'deleted': created['id']}
    assert client.csrf.fetch_count == 1


def test_rotated_csrf_token_recovers(seeded, make_client, app_instance):
    client = make_client(ADMIN)
    client.post('/api/customers', domain='customer', json={'name': 'One', 'territory': 'west'})
    stale = client.csrf.token
    # server forgets every issued token
    app_instance.extensions['csrf_tokens'].clear()
    created = client.post('/api/customers', domain='customer', json={'name': 'Two', 'territory': 'west'})
    assert created['name'] == 'Two'
    assert client.csrf.fetch_count == 2
    assert client.csrf.token != stale
    assert client.notifier.titles() == []


def test_rep_write_denied(seeded, make_client):
    client = make_client(DEMO_USER_CONTEXTS['salesRep'])
    with pytest.raises(AccessDeniedError) as exc:
        client.post('/api/customers', domain='customer', json={'name': 'Nope', 'territory': 'north'})
    assert '403' in str(exc.value)
    assert client.csrf.fetch_count == 2
    assert client.notifier.titles() == ['Access Denied']


def test_screen_without_permission_renders_empty(seeded, make_client):
    runner = QueryRunner(make_client(DEMO_USER_CONTEXTS['salesRep']), on_403=ON_403_RETURN_NONE)
    assert runner.fetch(['/api/service-tickets'], domain='service') is None
