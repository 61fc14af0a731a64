import os, sys, pytest
# Ensure the backend directory is on path so 'admin_console' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from admin_console import create_app, get_db
from admin_console.models.authz import Base
import admin_console.models.audit  # noqa: F401


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    app = create_app({
        'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
        'JWT_SECRET_KEY': 'test-secret-key-for-role-console-suite-0123456789',
    })
    yield app


@pytest.fixture()
def db(app_instance):
    session = get_db()
    yield session
    # Wipe rows so every API test starts from an empty schema
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.expunge_all()


@pytest.fixture()
def client(app_instance, db):
    return app_instance.test_client()
