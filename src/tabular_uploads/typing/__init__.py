"""Type lattice, value classifiers, parsers and column type inference."""

from tabular_uploads.typing.inference import column_types_from_rows, infer_value, relax_type
from tabular_uploads.typing.lattice import COLUMN_TYPES, LATTICE, VALUE_TYPES, UploadType
from tabular_uploads.typing.parsing import NumberSeparators, ParsingSettings

__all__ = [
    # Lattice
    "COLUMN_TYPES",
    "LATTICE",
    "UploadType",
    "VALUE_TYPES",
    # Locale
    "NumberSeparators",
    "ParsingSettings",
    # Inference
    "column_types_from_rows",
    "infer_value",
    "relax_type",
]
