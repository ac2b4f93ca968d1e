from datetime import datetime

from tenant_tables.models.enumerations import ErrorKind
from tenant_tables.tables import AccessScope


class TestLogTable:
    """Test the timestamped log table."""

    def test_schema_has_no_primary_key(self, audit_events):
        assert audit_events.schema.primary_key is None
        assert audit_events.schema.column_names[0] == "timestamp"

    def test_add_stamps_timestamp(self, audit_events):
        result = audit_events.add({"event": "login"})
        assert result.ok
        stamp = datetime.fromisoformat(result.value["timestamp"])
        assert stamp.tzinfo is not None

    def test_add_keeps_given_timestamp(self, audit_events):
        result = audit_events.add({"timestamp": "2024-01-01T00:00:00+00:00", "event": "login"})
        assert result.value["timestamp"] == "2024-01-01T00:00:00+00:00"

    def test_entries_may_repeat(self, audit_events):
        entry = {"timestamp": "2024-01-01T00:00:00+00:00", "event": "login"}
        assert audit_events.add(entry).ok
        assert audit_events.add(entry).ok
        assert len(audit_events.get_all().value) == 2

    def test_get_all_filters_and_hides(self, audit_events):
        audit_events.add({"event": "login", "detail": "from 10.0.0.1"})
        audit_events.add({"event": "logout"})
        rows = audit_events.get_all([("event", "login")]).value
        assert rows.column("event") == ["login"]
        assert "detail" not in rows.columns
        shown = audit_events.get_all([("event", "login")], show_hidden=True).value
        assert shown.column("detail") == ["from 10.0.0.1"]

    def test_delete(self, audit_events):
        audit_events.add({"event": "login"})
        audit_events.add({"event": "logout"})
        assert audit_events.delete([("event", "login")]).value == 1
        assert audit_events.get_all().value.column("event") == ["logout"]

    def test_unknown_column_is_rejected(self, audit_events):
        result = audit_events.add({"event": "login", "user": "alice"})
        assert not result.ok
        assert result.error.kind == ErrorKind.VALIDATION

    def test_tenant_scope_is_not_required(self, audit_events):
        # log tables are written by the service itself
        assert AccessScope().has_tenant is False
        assert audit_events.add({"event": "boot"}).ok

    def test_non_mapping_row_is_rejected(self, audit_events):
        result = audit_events.add(["event", "login"])
        assert result.error.kind == ErrorKind.VALIDATION
        assert len(audit_events.get_all().value) == 0

    def test_malformed_conditions_are_rejected(self, audit_events):
        assert audit_events.get_all([("event",)]).error.kind == ErrorKind.VALIDATION
        assert audit_events.delete(["event"]).error.kind == ErrorKind.VALIDATION
