"""Person record value."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from rolodex.core.constants import COLUMN_FIRST_NAME, COLUMN_ID, COLUMN_LAST_NAME


@dataclass(frozen=True, order=True)
class Person:
    """
    A stored person.

    Equality, hashing and ordering look at ``id`` only: two values with the
    same id are the same record, even if one carries edited names.
    """

    id: int
    first_name: str = field(compare=False)
    last_name: str = field(compare=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Person:
        """Build a Person from a PEOPLE row; raises ValueError on foreign data."""
        person_id = row[COLUMN_ID]
        first_name = row[COLUMN_FIRST_NAME]
        last_name = row[COLUMN_LAST_NAME]
        if isinstance(person_id, bool) or not isinstance(person_id, int):
            raise ValueError(f"Invalid person id {person_id!r}")
        if not isinstance(first_name, str) or not isinstance(last_name, str):
            raise ValueError(f"Person {person_id} has non-text names")
        return cls(
            id=person_id,
            first_name=first_name,
            last_name=last_name,
        )

    def with_names(self, first_name: str | None = None, last_name: str | None = None) -> Person:
        """Return the edited value; the id is kept."""
        return dataclasses.replace(
            self,
            first_name=self.first_name if first_name is None else first_name,
            last_name=self.last_name if last_name is None else last_name,
        )

    def __str__(self) -> str:
        return f"Person #{self.id}: {self.full_name}"
