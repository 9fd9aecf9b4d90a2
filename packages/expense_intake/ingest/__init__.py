"""CSV ingestion for ``expense_intake``."""

from .csv_import import CsvImportResult, CsvLineError, import_csv, parse_csv_line
from .utils import import_csv_file, read_csv_text

__all__ = [
    "CsvImportResult",
    "CsvLineError",
    "import_csv",
    "parse_csv_line",
    "import_csv_file",
    "read_csv_text",
]
