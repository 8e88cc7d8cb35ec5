"""
Filtering, counting and CSV export of pollution reports
"""

import csv
import io
from datetime import date
from typing import Dict, List, Optional

from ..schemas.report import Report, ReportSeverity

ALL_SEVERITIES = "All"
CSV_HEADERS = ["Location", "Description", "Severity", "Date", "Time"]


def filter_reports(
    reports: List[Report],
    severity: str = ALL_SEVERITIES,
    on_date: Optional[date] = None
) -> List[Report]:
    """Reports matching a severity ("All" for any) and a creation day"""
    return [
        r for r in reports
        if (severity == ALL_SEVERITIES or r.severity.value == severity)
        and (on_date is None or r.created_at.date() == on_date)
    ]


def severity_counts(reports: List[Report]) -> Dict[str, int]:
    counts = {s.value: 0 for s in ReportSeverity}
    for report in reports:
        counts[report.severity.value] += 1
    return counts


def reports_to_csv(reports: List[Report]) -> str:
    """Render reports as CSV with one row per report"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in reports:
        writer.writerow([
            r.location,
            r.description,
            r.severity.value,
            r.created_at.date().isoformat(),
            r.created_at.time().replace(microsecond=0).isoformat(),
        ])
    return buffer.getvalue()
