import os, sys, time, pytest
# Ensure backend directory is on path so 'dealergate' can be imported without installation
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import httpx
from flask_jwt_extended import create_access_token
from dealergate import create_app, get_db
from dealergate.models.records import Base, SalesRecord, ServiceTicket, Customer, Payment
from dealergate.config.settings import ClientSettings
from dealergate.client.retry import RetryPolicy


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    app = create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'JWT_SECRET_KEY': 'test-secret'})
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def seeded(app_instance):
    """Fresh report rows for each test."""
    session = get_db()
    for model in (SalesRecord, ServiceTicket, Customer, Payment):
        session.query(model).delete()
    session.add_all([
        SalesRecord(user_id='rep-001', manager_id='mgr-001', territory='north', customer_name='Acme', amount_cents=100,
                    team_comparison={'rank': 1}, manager_notes='call back'),
        SalesRecord(user_id='rep-002', manager_id='mgr-001', territory='east', customer_name='Beta', amount_cents=200,
                    team_comparison={'rank': 2}, manager_notes=None),
        SalesRecord(user_id='rep-009', manager_id='mgr-002', territory='south', customer_name='Gamma', amount_cents=300),
        ServiceTicket(technician_id='tech-001', assigned_manager_id='svc-mgr-001', territory='north', customer_name='Acme', summary='Fuser'),
        ServiceTicket(technician_id='tech-002', assigned_manager_id='svc-mgr-002', territory='west', customer_name='Delta', summary='Jam'),
        Customer(name='Acme', owner_id='rep-001', territory='north', profit_margin=30, credit_score=700, internal_notes='vip'),
        Customer(name='Beta', owner_id='rep-002', territory='east', profit_margin=20, credit_score=650, internal_notes=None),
        Payment(customer_name='Acme', territory='north', amount_cents=500, detailed_financials={'terms': 'NET30'}, credit_limit_cents=10000),
    ])
    session.commit()
    app_instance.extensions['csrf_tokens'].clear()
    yield session


@pytest.fixture()
def fast_settings():
    return ClientSettings(base_url='http://testserver', tenant_id=None, demo_authenticated=False)


@pytest.fixture()
def no_sleep_retry(monkeypatch):
    """Default retry policy whose backoff waits are recorded in ``policy.delays`` instead of slept."""
    delays = []
    monkeypatch.setattr(time, 'sleep', delays.append)
    policy = RetryPolicy(max_retries=2, base_delay=1.0, max_delay=10.0)
    policy.delays = delays
    return policy


@pytest.fixture()
def bearer(app_instance):
    """Factory: Authorization header for a user context, bypassing the demo login endpoint."""
    def _bearer(user_context):
        with app_instance.app_context():
            token = create_access_token(identity=user_context.user_id, additional_claims=user_context.to_claims())
        return {'Authorization': f'Bearer {token}'}
    return _bearer


@pytest.fixture()
def wsgi_transport(app_instance):
    return httpx.WSGITransport(app=app_instance)
