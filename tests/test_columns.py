import dataclasses

import pytest

from tenant_tables.models.enumerations import ColumnType, Visibility
from tenant_tables.tables import ColumnSpec, TableSchema, admin_schema, log_schema, tenant_schema


class TestTenantSchema:
    """Test the canonical tenant-resource schema."""

    def test_base_columns_in_order(self):
        schema = tenant_schema("clusters")
        assert schema.column_names == ("id", "project_id", "owner_id", "visibility")
        assert schema.primary_key == "id"

    def test_base_column_shapes(self):
        schema = tenant_schema("clusters")
        assert schema.column("id").max_length == 36
        assert schema.column("project_id").max_length == 128
        assert schema.column("owner_id").max_length == 128
        visibility = schema.column("visibility")
        assert visibility.type == ColumnType.STRING
        assert visibility.max_length == 10
        assert visibility.default == Visibility.PRIVATE.value
        assert set(visibility.choices) == {"private", "shared", "public"}

    def test_extra_columns_follow_base(self):
        schema = tenant_schema("clusters", [ColumnSpec("name", max_length=64)])
        assert schema.column_names[-1] == "name"
        assert isinstance(schema.columns, tuple)

    def test_extra_column_cannot_shadow_base(self):
        with pytest.raises(ValueError):
            tenant_schema("clusters", [ColumnSpec("owner_id")])

    def test_schema_is_immutable(self):
        schema = tenant_schema("clusters")
        with pytest.raises(dataclasses.FrozenInstanceError):
            schema.name = "other"
        with pytest.raises(dataclasses.FrozenInstanceError):
            schema.columns[0].max_length = 10


class TestOtherSchemas:
    """Test admin and log schemas."""

    def test_admin_schema(self):
        schema = admin_schema("templates")
        assert schema.column_names == ("id", "name", "creator_id")
        assert schema.primary_key == "id"
        assert schema.column("name").max_length == 36
        assert schema.column("creator_id").max_length == 128

    def test_log_schema_has_no_primary_key(self):
        schema = log_schema("events")
        assert schema.column_names == ("timestamp",)
        assert schema.primary_key is None
        assert schema.column("timestamp").max_length == 128


class TestColumnSpec:
    """Test column descriptor validation."""

    @pytest.mark.parametrize("name", ["", "1abc", "drop table", "a" * 64])
    def test_invalid_column_names(self, name):
        with pytest.raises(ValueError):
            ColumnSpec(name)

    def test_invalid_table_name(self):
        with pytest.raises(ValueError):
            TableSchema("bad-name", ())

    def test_non_positive_length(self):
        with pytest.raises(ValueError):
            ColumnSpec("name", max_length=0)

    def test_required(self):
        assert ColumnSpec("id", is_primary=True).required
        assert ColumnSpec("owner_id", nullable=False).required
        assert not ColumnSpec("note").required

    def test_visible_columns(self):
        schema = tenant_schema("clusters", [ColumnSpec("secret", hidden=True)])
        assert "secret" not in [c.name for c in schema.visible_columns()]
        assert "secret" in [c.name for c in schema.visible_columns(show_hidden=True)]

    def test_unknown_column_lookup(self):
        with pytest.raises(KeyError):
            tenant_schema("clusters").column("missing")
