"""Queries against the uploaded-table registry.

None of these commit; the caller owns the transaction.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from tabular_uploads.storage.models import UploadedTable


def register_upload(
    session: Session,
    table_name: str,
    display_name: str,
    source_filename: str | None = None,
    row_count: int = 0,
) -> UploadedTable:
    """Record a freshly created table as an upload."""
    uploaded = UploadedTable(
        table_name=table_name,
        display_name=display_name,
        source_filename=source_filename,
        is_upload=True,
        row_count=row_count,
    )
    session.add(uploaded)
    session.flush()
    return uploaded


def get_upload_by_name(session: Session, table_name: str) -> UploadedTable | None:
    """Get a registered upload, ignoring tables registered with ``is_upload`` unset."""
    stmt = select(UploadedTable).where(
        UploadedTable.table_name == table_name,
        UploadedTable.is_upload.is_(True),
    )
    return session.execute(stmt).scalar_one_or_none()


def record_append(session: Session, table_name: str, num_rows: int) -> UploadedTable | None:
    """Add appended rows to the registered row count."""
    uploaded = get_upload_by_name(session, table_name)
    if uploaded is not None:
        uploaded.row_count += num_rows
        session.flush()
    return uploaded
