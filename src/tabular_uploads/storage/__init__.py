"""Metadata storage for uploaded tables."""

from tabular_uploads.storage.base import Base, init_database
from tabular_uploads.storage.models import UploadedTable
from tabular_uploads.storage.uploads import get_upload_by_name, record_append, register_upload

__all__ = [
    "Base",
    "init_database",
    "UploadedTable",
    "get_upload_by_name",
    "record_append",
    "register_upload",
]
