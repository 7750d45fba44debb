import csv
from typing import Dict, Iterable, List, Any

from absencetracker.models import AbsenceRecord

CSV_FIELDS = ["day", "reason", "month", "year"]


def records_to_rows(records: Iterable[AbsenceRecord]) -> List[Dict[str, Any]]:
    """Rows for CSV export, sorted by day. `month` is 0-based like the stored form."""
    return [rec.to_dict() for rec in sorted(records, key=lambda r: r.day)]


def export_records_csv(records: Iterable[AbsenceRecord], filename: str) -> int:
    """Write all records to `filename`; returns the number of rows written."""
    rows = records_to_rows(records)
    with open(filename, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return len(rows)
