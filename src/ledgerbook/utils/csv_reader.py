"""CSV reading shared by the importers."""

import csv
from pathlib import Path
from typing import Iterable

from ledgerbook.domain.errors import ValidationError


def read_csv_rows(
    csv_file_path: str, required_columns: Iterable[str] = ()
) -> list[tuple[int, dict[str, str]]]:
    """Read a CSV file into ``(row_number, row)`` pairs.

    Header names are matched case-insensitively: row keys are the lower-cased,
    stripped header names and values are stripped strings (never None).
    Row numbers count the header as row 1. Fully blank rows are dropped.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file has no header or lacks a required column
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        # Try to detect delimiter
        sample = f.read(2048)
        f.seek(0)
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
        except csv.Error:
            delimiter = ","

        reader = csv.DictReader(f, delimiter=delimiter)
        if not reader.fieldnames:
            raise ValidationError("CSV file has no columns")

        columns = {(name or "").strip().lower() for name in reader.fieldnames}
        missing = [col for col in required_columns if col.lower() not in columns]
        if missing:
            raise ValidationError(f"CSV file missing required columns: {', '.join(missing)}")

        rows = []
        for row_num, row in enumerate(reader, start=2):
            values = {
                (key or "").strip().lower(): (value or "").strip() if isinstance(value, str) else ""
                for key, value in row.items()
                if key is not None
            }
            if not any(values.values()):
                continue
            rows.append((row_num, values))
    return rows
