# app/services/report_export.py

import csv
from datetime import datetime, timezone
from io import BytesIO, StringIO
from typing import Iterable, List

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.utils.calculations import LecturerReportRow


def _money(value) -> str:
    return f"R {value:,.2f}"


def render_report_pdf(rows: List[LecturerReportRow]) -> bytes:
    """Approved claims per lecturer with a grand total line."""
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    columns = [40, 190, 400, 480]

    def header(y):
        pdf.setFont("Helvetica-Bold", 10)
        for x, title in zip(columns, ["Lecturer", "Email", "Total Hours", "Total Amount"]):
            pdf.drawString(x, y, title)
        return y - 16

    y = height - 40

    # HEADER
    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawString(40, y, "Approved Claims Report")
    y -= 18
    pdf.setFont("Helvetica", 10)
    pdf.drawString(40, y, f"Generated: {datetime.now(timezone.utc):%Y-%m-%d %H:%M} UTC")
    y -= 30

    y = header(y)

    grand_hours = 0
    grand_amount = 0

    # ROWS
    pdf.setFont("Helvetica", 10)
    for row in rows:
        if y < 80:
            pdf.showPage()
            y = header(height - 40)
            pdf.setFont("Helvetica", 10)

        pdf.drawString(columns[0], y, row.lecturer_name[:30])
        pdf.drawString(columns[1], y, row.lecturer_email[:40])
        pdf.drawString(columns[2], y, str(row.total_hours))
        pdf.drawString(columns[3], y, _money(row.total_amount))
        y -= 14

        grand_hours += row.total_hours
        grand_amount += row.total_amount

    # GRAND TOTAL
    y -= 6
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(columns[0], y, "TOTAL")
    pdf.drawString(columns[2], y, str(grand_hours))
    pdf.drawString(columns[3], y, _money(grand_amount))

    pdf.showPage()
    pdf.save()

    buffer.seek(0)
    return buffer.read()


def render_lecturers_csv(users: Iterable) -> bytes:
    out = StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(["Name", "Email", "Role", "HourlyRate", "Approved"])
    for user in users:
        writer.writerow([
            user.name,
            user.email,
            user.role.value,
            f"{user.hourly_rate:.2f}",
            "yes" if user.is_approved else "no",
        ])
    return out.getvalue().encode("utf-8")
