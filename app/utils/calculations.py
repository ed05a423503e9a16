from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List


@dataclass(frozen=True)
class LecturerReportRow:
    lecturer_name: str
    lecturer_email: str
    total_hours: int
    total_amount: Decimal


def sum_claim_totals(claims: Iterable) -> Decimal:
    return sum((c.total for c in claims), Decimal("0"))


def build_report_rows(claims: Iterable) -> List[LecturerReportRow]:
    """Group claims per lecturer identity, largest amount first."""
    grouped = OrderedDict()
    for claim in claims:
        key = (claim.lecturer_name, claim.lecturer_email)
        hours, amount = grouped.get(key, (0, Decimal("0")))
        grouped[key] = (hours + claim.hours_worked, amount + claim.total)

    rows = [
        LecturerReportRow(
            lecturer_name=name,
            lecturer_email=email,
            total_hours=hours,
            total_amount=amount,
        )
        for (name, email), (hours, amount) in grouped.items()
    ]
    rows.sort(key=lambda r: (-r.total_amount, r.lecturer_name.lower(), r.lecturer_email))
    return rows
