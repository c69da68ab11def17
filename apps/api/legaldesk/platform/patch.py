from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, model_validator


class PatchModel(BaseModel):
    """Partial update payload.

    Omitted fields are left untouched and an explicit ``null`` clears the
    column. Columns that cannot be cleared are listed in ``non_nullable``.
    """

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> "PatchModel":
        cleared = sorted(name for name in self.model_fields_set & self.non_nullable if getattr(self, name) is None)
        if cleared:
            raise ValueError(f"fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
