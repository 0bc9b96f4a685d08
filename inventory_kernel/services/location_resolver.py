"""
LocationResolver -- normalize a location reference into a Location row.

Callers refer to locations three ways: by the row itself, by its UUID, or
by its business code.  Resolution is read-only and never mutates the
Location.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from inventory_kernel.exceptions import LocationNotFoundError
from inventory_kernel.models.location import Location
from inventory_kernel.services.base import BaseService

LocationRef = Location | UUID | str


class LocationResolver(BaseService[Location]):
    """Resolves ``LocationRef`` values against the location directory."""

    def resolve(self, ref: LocationRef) -> Location:
        """
        Return the Location that ``ref`` names.

        Raises:
            LocationNotFoundError: If no location matches the id or code.
            TypeError: If ``ref`` is not a Location, UUID, or str.
        """
        if isinstance(ref, Location):
            return ref
        if isinstance(ref, UUID):
            location = self.session.get(Location, ref)
        elif isinstance(ref, str):
            stmt = select(Location).where(Location.code == ref)
            location = self.session.execute(stmt).scalar_one_or_none()
        else:
            raise TypeError(
                f"Location reference must be a Location, UUID or code, "
                f"got {type(ref).__name__}"
            )
        if location is None:
            raise LocationNotFoundError(str(ref))
        return location

