import pytest

from tenant_tables.models.enumerations import ErrorKind
from tenant_tables.tables import ColumnSpec, Result, RowTable, SqlTableDriver, TableOperationError, tenant_schema

ROW = {
    "id": "0f8fad5b-d9cb-469f-a165-70867728950e",
    "owner_id": "alice",
    "project_id": "apollo",
    "name": "web",
}


@pytest.fixture
def driver(app):
    driver = SqlTableDriver(tenant_schema("driver_rows", [ColumnSpec("name", max_length=32)]))
    assert driver.create().ok
    return driver


class TestSqlTableDriver:
    """Test the generic table driver directly."""

    def test_create_is_idempotent(self, driver):
        assert driver.create().ok

    def test_insert_and_select(self, driver):
        inserted = driver.insert(ROW)
        assert inserted.ok
        assert inserted.value["visibility"] == "private"
        row = driver.select_one([("name", "web")]).value
        assert row == {**ROW, "visibility": "private"}

    def test_select_all_without_conditions(self, driver):
        driver.insert(ROW)
        driver.insert({**ROW, "id": "1f8fad5b-d9cb-469f-a165-70867728950e", "owner_id": "bob"})
        rows = driver.select_all().value
        assert rows.columns == ("id", "project_id", "owner_id", "visibility", "name")
        assert sorted(rows.column("owner_id")) == ["alice", "bob"]

    def test_none_condition_matches_null(self, driver):
        driver.insert({**ROW, "name": None})
        assert driver.select_one([("name", None)]).value["id"] == ROW["id"]

    def test_duplicate_primary_key(self, driver):
        assert driver.insert(ROW).ok
        duplicate = driver.insert(ROW)
        assert duplicate.error.kind == ErrorKind.DELEGATION
        assert duplicate.error.context["detail"]

    def test_update_and_delete_report_counts(self, driver):
        driver.insert(ROW)
        assert driver.update([("owner_id", "alice")], {"name": "api"}).value == 1
        assert driver.update([("owner_id", "nobody")], {"name": "api"}).value == 0
        assert driver.delete([("name", "api")]).value == 1
        assert driver.select_one([("id", ROW["id"])]).value is None


class TestResult:
    """Test the result and row table types."""

    def test_success(self):
        result = Result.success(3)
        assert result.ok
        assert bool(result)
        assert result.unwrap() == 3

    def test_failure(self):
        result = Result.failure(ErrorKind.VALIDATION, "bad row", table="t")
        assert not result.ok
        assert result.error.to_dict() == {
            "kind": "validation",
            "message": "bad row",
            "context": {"table": "t"},
        }
        with pytest.raises(TableOperationError) as exc:
            result.unwrap()
        assert exc.value.error is result.error

    def test_row_table(self):
        table = RowTable.from_mappings(["a", "b"], [{"a": 1, "b": 2}, {"b": 4, "a": 3}])
        assert len(table) == 2
        assert table.rows == ((1, 2), (3, 4))
        assert table.records() == [{"a": 1, "b": 2}, {"a": 3, "b": 4}]
        assert table.column("b") == [2, 4]


class TestSqlTableDriverInput:
    """Test driver input checks that run before any SQL."""

    def test_malformed_conditions(self, driver):
        for conditions in ([("name",)], ["name"], "name", 5, [(None, "web")]):
            result = driver.select_all(conditions)
            assert result.error.kind == ErrorKind.VALIDATION

    def test_non_mapping_values(self, driver):
        assert driver.insert(None).error.kind == ErrorKind.VALIDATION
        assert driver.update([("name", "web")], ["name"]).error.kind == ErrorKind.VALIDATION

    def test_conflicting_registration_raises(self, driver):
        with pytest.raises(ValueError):
            SqlTableDriver(tenant_schema("driver_rows", [ColumnSpec("name", max_length=64)]))
        assert driver.table.c["name"].type.length == 32

    def test_matching_registration_reuses_table(self, driver):
        again = SqlTableDriver(tenant_schema("driver_rows", [ColumnSpec("name", max_length=32)]))
        assert again.table is driver.table
