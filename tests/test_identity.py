import uuid

import pytest

from tenant_tables.tables import IdentityGenerationError, generate_id, is_canonical_id
from tenant_tables.tables import identity


class TestIdentity:
    """Test identifier generation."""

    def test_generated_id_is_canonical(self):
        """Generated ids are 36-char lowercase 8-4-4-4-12 strings."""
        value = generate_id()
        assert len(value) == 36
        assert value == value.lower()
        assert [len(part) for part in value.split("-")] == [8, 4, 4, 4, 12]
        assert is_canonical_id(value)
        assert str(uuid.UUID(value)) == value

    def test_generated_ids_do_not_collide(self):
        """Ten thousand generations produce ten thousand distinct ids."""
        ids = {generate_id() for _ in range(10000)}
        assert len(ids) == 10000

    @pytest.mark.parametrize(
        "value",
        [
            "ABCDEFAB-1234-1234-1234-ABCDEFABCDEF",
            "abcdefab12341234123412345678abcdefab",
            "abcdefab-1234-1234-1234-abcdefabcde",
            "",
            None,
            42,
        ],
    )
    def test_rejects_non_canonical_values(self, value):
        assert not is_canonical_id(value)

    def test_random_source_failure_is_fatal(self, monkeypatch):
        """An exhausted random source surfaces as IdentityGenerationError."""

        def broken():
            raise OSError("no entropy")

        monkeypatch.setattr(identity.uuid, "uuid4", broken)
        with pytest.raises(IdentityGenerationError):
            generate_id()
