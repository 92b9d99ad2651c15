"""Data structures shared by detection, migration planning and loading.

All of these are derived per upload or append and never persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tabular_uploads.typing.lattice import UploadType

ColumnSchema = dict[str, UploadType]


class DetectedSchema(BaseModel):
    """Schema detected from a CSV header and its rows.

    Both mappings preserve header order. ``extant_columns`` never contains
    the name of a generated column.
    """

    extant_columns: ColumnSchema
    generated_columns: ColumnSchema

    @property
    def all_columns(self) -> ColumnSchema:
        """Generated columns first, then the file's columns."""
        return {**self.generated_columns, **self.extant_columns}


class MigrationPlan(BaseModel):
    """Changes to apply to an existing table before appending a file.

    ``added`` and ``updated`` are only applied when ``modify_schema`` is set;
    the plan is all-or-nothing.
    """

    added: ColumnSchema = Field(default_factory=dict)
    updated: ColumnSchema = Field(default_factory=dict)
    modify_schema: bool = False
    create_auto_pk: bool = False

    # Per header column, in header order
    column_names: list[str] = Field(default_factory=list)
    old_types: list[UploadType | None] = Field(default_factory=list)
    detected_types: list[UploadType] = Field(default_factory=list)
    new_types: list[UploadType] = Field(default_factory=list)

    @property
    def declined(self) -> bool:
        """Whether the file needs type changes that are not allowed implicitly."""
        return self.detected_types != self.new_types

    @property
    def load_types(self) -> list[UploadType]:
        """Types the file's rows are parsed with.

        When the schema is left untouched, columns keep their current types,
        including those an allowed upgrade would otherwise have widened.
        """
        if self.modify_schema:
            return self.new_types
        return [old or new for old, new in zip(self.old_types, self.new_types, strict=True)]


class UploadStats(BaseModel):
    """Summary of a create or append operation."""

    table_name: str
    num_rows: int
    num_columns: int
    generated_columns: int
    size_mb: float
    upload_seconds: float = 0.0


class CreatedUpload(BaseModel):
    """A table created from a CSV file."""

    table_name: str
    display_name: str
    detected_schema: DetectedSchema
    stats: UploadStats
