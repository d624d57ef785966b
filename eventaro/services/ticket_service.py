"""
PDF ticket rendering for confirmed reservations.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import A5
from reportlab.pdfgen import canvas

from eventaro.core.metrics import tickets_rendered, ticket_render_latency

MARGIN = 40
TITLE_FONT = ("Helvetica-Bold", 20)
BODY_FONT = ("Helvetica", 12)
LINE_HEIGHT = 18


@dataclass(frozen=True)
class Ticket:
    content: bytes
    media_type: str
    filename: str


def format_event_date(value: datetime) -> str:
    return value.strftime("%A %d %B %Y, %H:%M %Z").strip()


def render_ticket(
    reservation_id: int,
    event_title: str,
    event_date_time: datetime,
    event_location: str,
    participant_name: str,
) -> bytes:
    """Lay out a one-page A5 ticket and return the PDF bytes."""
    start = time.perf_counter()
    output = BytesIO()
    width, height = A5
    pdf = canvas.Canvas(output, pagesize=A5)
    pdf.setTitle(f"Ticket {reservation_id}")

    y = height - MARGIN - TITLE_FONT[1]
    pdf.setFont(*TITLE_FONT)
    pdf.drawCentredString(width / 2, y, "Event Ticket")
    y -= 2 * LINE_HEIGHT

    pdf.setFont(*BODY_FONT)
    for line in (
        f"Event: {event_title}",
        f"Date: {format_event_date(event_date_time)}",
        f"Location: {event_location}",
        "",
        f"Participant: {participant_name}",
        f"Reservation ID: {reservation_id}",
    ):
        if line:
            pdf.drawString(MARGIN, y, line)
        y -= LINE_HEIGHT

    pdf.showPage()
    pdf.save()

    ticket_render_latency.observe(time.perf_counter() - start)
    tickets_rendered.inc()
    return output.getvalue()
