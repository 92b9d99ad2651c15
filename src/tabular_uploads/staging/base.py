"""Storage boundary for uploaded tables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tabular_uploads.typing.lattice import UploadType


class UploadDriver(ABC):
    """Base class for the databases that uploaded tables are written to.

    Drivers only execute what they are asked to. Schema decisions are made
    by the caller; the driver maps upload types to native types and moves rows.
    """

    #: Whether a generated PK can be added to a table that predates it
    create_auto_pk_with_append: bool = False

    @property
    @abstractmethod
    def table_name_length_limit(self) -> int:
        """Maximum length of a table name."""
        pass

    @abstractmethod
    def database_type(self, upload_type: UploadType) -> str:
        """Native column type used to store an upload type."""
        pass

    @abstractmethod
    def create_table(
        self,
        table_name: str,
        column_types: Mapping[str, UploadType],
        primary_key: str | None = None,
    ) -> None:
        """Create a table. Raises if it already exists.

        Args:
            table_name: Name of the table
            column_types: Upload type per column, in column order
            primary_key: Generated PK column, whose values the driver assigns
        """
        pass

    @abstractmethod
    def insert_rows(
        self,
        table_name: str,
        column_names: Sequence[str],
        rows: Iterable[Sequence[Any]],
    ) -> int:
        """Insert parsed rows and return how many were written.

        ``rows`` is consumed lazily. Values for a generated PK column are
        assigned by the driver when the table has one.
        """
        pass

    @abstractmethod
    def add_columns(self, table_name: str, column_types: Mapping[str, UploadType]) -> None:
        pass

    @abstractmethod
    def alter_columns(self, table_name: str, column_types: Mapping[str, UploadType]) -> None:
        pass

    @abstractmethod
    def drop_table(self, table_name: str) -> None:
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        pass

    @abstractmethod
    def column_types(self, table_name: str) -> dict[str, str]:
        """Native column types keyed by column name, in column order."""
        pass

    @abstractmethod
    def add_auto_pk_column(self, table_name: str, column_name: str) -> None:
        """Add a generated PK column to an existing table, numbering its rows.

        Only called when ``create_auto_pk_with_append`` is set.
        """
        pass
