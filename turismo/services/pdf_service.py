import io
from datetime import datetime

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas as _canvas


def _wrap(text: str, width: int = 90):
    line = ""
    for word in text.split():
        if line and len(line) + len(word) + 1 > width:
            yield line
            line = word
        else:
            line = f"{line} {word}".strip()
    if line:
        yield line


def render_booking_pdf(notice, *, brand: str, company: str, tz) -> bytes:
    """One-page booking confirmation."""
    buf = io.BytesIO()
    pdf = _canvas.Canvas(buf, pagesize=A4)
    page_w, page_h = A4
    x = 50
    y = page_h - 60

    pdf.setTitle(f"Reserva {notice.booking_id}")
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawCentredString(page_w / 2, y, f"{brand} - Confirmación de Reserva")
    y -= 40

    when: datetime = notice.date.astimezone(tz)
    pdf.setFont("Helvetica", 13)
    for line in (
        f"Paquete: {notice.package_title or 'N/A'}",
        f"Fecha del tour: {when.strftime('%d/%m/%Y %H:%M')}",
        f"Pasajeros: Adultos {notice.adults} / Niños {notice.children}",
        f"Total estimado: {notice.total_price:,.2f} {notice.currency}",
        f"Estado: {notice.status}",
    ):
        pdf.drawString(x, y, line)
        y -= 20

    y -= 10
    pdf.setFont("Helvetica-Bold", 13)
    pdf.drawString(x, y, "Datos del cliente:")
    y -= 20
    pdf.setFont("Helvetica", 12)
    for line in (
        f"Nombre: {notice.customer_name}",
        f"Email: {notice.customer_email}",
        f"Teléfono: {notice.customer_phone or ''}",
        f"País: {notice.customer_country or ''}",
    ):
        pdf.drawString(x, y, line)
        y -= 18

    if notice.notes:
        y -= 10
        pdf.setFont("Helvetica-Bold", 13)
        pdf.drawString(x, y, "Notas:")
        y -= 20
        pdf.setFont("Helvetica", 12)
        for line in _wrap(notice.notes):
            if y < 80:
                break
            pdf.drawString(x, y, line)
            y -= 16

    pdf.setFont("Helvetica", 9)
    pdf.setFillGray(0.5)
    pdf.drawCentredString(page_w / 2, 40, f"Generado automáticamente por {company}")

    pdf.showPage()
    pdf.save()
    return buf.getvalue()
