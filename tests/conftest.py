import pytest

from tenant_tables import create_app
from tenant_tables.extensions import db
from tenant_tables.models.enumerations import ColumnType
from tenant_tables.tables import AccessScope, AdminTable, ColumnSpec, LogTable, TenantTable


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def runner(app):
    """Create test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def clusters(app):
    """Tenant table with one plain and one hidden extra column."""
    table = TenantTable(
        "clusters",
        extra_columns=(
            ColumnSpec("name", max_length=64, nullable=False),
            ColumnSpec("size", type=ColumnType.INTEGER),
            ColumnSpec("api_token", max_length=128, hidden=True),
        ),
    )
    assert table.create().ok
    return table


@pytest.fixture(scope='function')
def templates(app):
    """Admin table with an extra description column."""
    table = AdminTable("templates", extra_columns=(ColumnSpec("description", max_length=256),))
    assert table.create().ok
    return table


@pytest.fixture(scope='function')
def audit_events(app):
    """Log table recording an event name per entry."""
    table = LogTable(
        "audit_events",
        extra_columns=(
            ColumnSpec("event", max_length=64),
            ColumnSpec("detail", hidden=True),
        ),
    )
    assert table.create().ok
    return table


@pytest.fixture
def alice():
    return AccessScope(owner_id="alice", project_id="apollo")


@pytest.fixture
def bob():
    return AccessScope(owner_id="bob", project_id="apollo")


@pytest.fixture
def admin():
    return AccessScope.admin(owner_id="root", project_id="ops")
