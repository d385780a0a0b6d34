import os, sys, pytest
# Ensure the backend directory is on path so 'backoffice' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from backoffice import create_app, get_db
from backoffice.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import backoffice.models.audit  # noqa: F401
from backoffice.services.grants import sync_catalog, apply_role_presets

@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'JWT_SECRET_KEY': 'test-secret-key-with-enough-length-for-hs256'})
    with app.app_context():
        session = get_db()
        Base.metadata.create_all(session.get_bind())
        # Every test sees the full catalog and the preset roles, as after running the seed script
        sync_catalog(session, app.extensions['permission_catalog'])
        apply_role_presets(session)
        session.commit()
    yield app

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
