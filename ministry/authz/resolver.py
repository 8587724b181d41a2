"""
Parent-id lookups injected into the authorizer.

The authorizer never touches the database. Callers hand it a resolver that
answers three questions about the organisation tree:

    university    -> region
    small group   -> (university, region)
    alumni group  -> region

``None`` means the id is unknown.
"""

from __future__ import annotations

from typing import Mapping, Protocol


class ParentResolver(Protocol):
    def university_region(self, university_id: int) -> int | None: ...

    def small_group_parents(self, small_group_id: int) -> tuple[int, int] | None:
        """Return ``(university_id, region_id)``."""
        ...

    def alumni_group_region(self, alumni_group_id: int) -> int | None: ...


class MappingResolver:
    """In-memory resolver backed by plain dicts (tests, fixtures, cached trees)."""

    def __init__(
        self,
        universities: Mapping[int, int] | None = None,
        small_groups: Mapping[int, tuple[int, int]] | None = None,
        alumni_groups: Mapping[int, int] | None = None,
    ) -> None:
        self._universities = dict(universities or {})
        self._small_groups = dict(small_groups or {})
        self._alumni_groups = dict(alumni_groups or {})

    def university_region(self, university_id: int) -> int | None:
        return self._universities.get(university_id)

    def small_group_parents(self, small_group_id: int) -> tuple[int, int] | None:
        return self._small_groups.get(small_group_id)

    def alumni_group_region(self, alumni_group_id: int) -> int | None:
        return self._alumni_groups.get(alumni_group_id)
