"""
Tests for LocationResolver.
"""

from uuid import uuid4

import pytest

from inventory_kernel.exceptions import LocationNotFoundError
from inventory_kernel.services.location_resolver import LocationResolver


class TestLocationResolver:
    """Resolution by row, id and code."""

    def test_resolves_row_to_itself(self, session, location_a):
        assert LocationResolver(session).resolve(location_a) is location_a

    def test_resolves_uuid(self, session, location_a):
        assert LocationResolver(session).resolve(location_a.id) is location_a

    def test_resolves_code(self, session, location_a, location_b):
        assert LocationResolver(session).resolve("B") is location_b

    def test_code_is_exact(self, session, location_a):
        """Codes are matched exactly, not by prefix or case."""
        resolver = LocationResolver(session)
        with pytest.raises(LocationNotFoundError):
            resolver.resolve("a")

    def test_unknown_uuid(self, session):
        missing = uuid4()
        with pytest.raises(LocationNotFoundError) as exc_info:
            LocationResolver(session).resolve(missing)
        assert exc_info.value.reference == str(missing)
        assert exc_info.value.code == "LOCATION_NOT_FOUND"

    @pytest.mark.parametrize("ref", [42, None, 3.5])
    def test_rejects_other_types(self, session, ref):
        with pytest.raises(TypeError):
            LocationResolver(session).resolve(ref)
