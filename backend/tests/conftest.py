import os, sys, pytest
# Ensure backend directory is on path so 'app' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from app import create_app, get_db
from app.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import app.models.audit  # noqa: F401
import app.models.fund  # noqa: F401
import app.models.budget_request  # noqa: F401
import app.models.approval  # noqa: F401
import app.models.item_category  # noqa: F401


@pytest.fixture(scope='session', autouse=True)
def app_instance(tmp_path_factory):
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({
        'TESTING': True,
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp('var')),
        'NOTIFY_WEBHOOK_URL': None,
    })
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
