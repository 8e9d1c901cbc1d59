"""
Printable documents: the prescription PDF and the patient export.

The PDF is drawn on a reportlab canvas following the hospital's
:class:`~core.models.PrescriptionTemplate`; the export is a pandas frame
written to xlsx through openpyxl.
"""
from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import Optional

import pandas as pd
import qrcode
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, A5, LEGAL, LETTER
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from django.utils import timezone

from core.models import Hospital, Patient, PrescriptionTemplate

logger = logging.getLogger(__name__)

PAGE_SIZES = {'A4': A4, 'LETTER': LETTER, 'A5': A5, 'LEGAL': LEGAL}

# regular -> bold of the standard PDF fonts
FONTS = {
    'Helvetica': 'Helvetica-Bold',
    'Times-Roman': 'Times-Bold',
    'Courier': 'Courier-Bold',
}

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

EXPORT_COLUMNS = [
    ('Patient Name', 'name', 25),
    ('Visit Date', 'registered_at', 20),
    ('Phone', 'phone', 15),
    ('Age', 'age', 10),
    ('Gender', 'gender', 10),
    ('Department', 'department', 15),
    ('Reason', 'reason', 20),
    ('Prescription', 'prescription', 30),
    ('Cost Paid', 'cost', 12),
    ('Status', 'status', 15),
]


def paper_size(name: Optional[str]):
    return PAGE_SIZES.get((name or 'A4').upper(), A4)


def qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    return buffered.getvalue()


def _hex(value: Optional[str], default: str):
    try:
        return colors.HexColor(value or default)
    except ValueError:
        return colors.HexColor(default)


class _Page:
    """Top-down text cursor over a canvas, starting a new page when full."""

    def __init__(self, c: canvas.Canvas, size, tpl: PrescriptionTemplate):
        self.c = c
        self.width, self.height = size
        self.left = tpl.margin_left
        self.right = self.width - tpl.margin_right
        self.top = self.height - tpl.margin_top
        self.bottom = tpl.margin_bottom
        self.y = self.top

    def need(self, h: float) -> None:
        if self.y - h < self.bottom:
            self.c.showPage()
            self.y = self.top

    def text(self, s: str, font: str, size: float, color, align: str = 'left', gap: float = 1.35) -> None:
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        for line in simpleSplit(s or '', font, size, self.right - self.left) or ['']:
            self.need(size * gap)
            self.y -= size * gap
            if align == 'center':
                self.c.drawCentredString((self.left + self.right) / 2, self.y, line)
            elif align == 'right':
                self.c.drawRightString(self.right, self.y, line)
            else:
                self.c.drawString(self.left, self.y, line)

    def skip(self, h: float) -> None:
        self.y -= h


def render_prescription(patient: Patient, hospital: Hospital, tpl: PrescriptionTemplate, *,
                        doctor_name: str, portal_url: Optional[str] = None) -> bytes:
    """Render one prescription and return the PDF bytes."""
    size = paper_size(tpl.paper_size)
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=size)
    c.setTitle(f"Prescription - {patient.name}")
    page = _Page(c, size, tpl)

    font = tpl.font_family if tpl.font_family in FONTS else 'Helvetica'
    bold = FONTS[font]
    fs = tpl.font_size or 12
    primary = _hex(tpl.primary_color, '#0EA5E9')
    secondary = _hex(tpl.secondary_color, '#666666')
    black = colors.black

    if tpl.show_watermark and tpl.watermark_text:
        c.saveState()
        c.setFillColor(colors.lightgrey)
        c.setFillAlpha(0.15)
        c.setFont(bold, 60)
        c.translate(page.width / 2, page.height / 2)
        c.rotate(45)
        c.drawCentredString(0, 0, tpl.watermark_text)
        c.restoreState()

    if tpl.show_letterhead:
        page.text(tpl.hospital_name or hospital.name or 'Medical Center', bold, 20, primary, 'center')
        page.text(tpl.hospital_address or hospital.address or '', font, 10, secondary, 'center')
        contact = tpl.hospital_phone or hospital.phone or ''
        if tpl.hospital_email:
            contact = f"{contact} | {tpl.hospital_email}" if contact else tpl.hospital_email
        page.text(contact, font, 10, secondary, 'center')
        page.skip(6)
        c.setStrokeColor(primary)
        c.line(page.left, page.y, page.right, page.y)
        page.skip(14)

    if tpl.header_text:
        page.text(tpl.header_text, font, fs - 2, secondary, 'center')
        page.skip(6)

    # doctor and date share a line
    page.need(fs * 1.35)
    page.y -= fs * 1.35
    c.setFont(font, fs)
    c.setFillColor(black)
    c.drawString(page.left, page.y, f"Doctor: {doctor_name}")
    c.drawRightString(page.right, page.y, f"Date: {timezone.localdate():%d/%m/%Y}")
    page.skip(fs)

    def section(title: str, body: str) -> None:
        page.text(title, bold, fs + 2, primary)
        page.skip(4)
        page.text(body, font, fs, black)
        page.skip(fs)

    info = [
        f"Name: {patient.name}",
        f"Age: {patient.age if patient.age is not None else '-'} years | Gender: {patient.gender or '-'}",
        f"Phone: {patient.phone or '-'}",
        f"Token No: {patient.token}",
        f"Department: {patient.department}",
    ]
    page.text('Patient Information', bold, fs + 2, primary)
    page.skip(4)
    for line in info:
        page.text(line, font, fs, black)
    page.skip(fs)

    if tpl.show_vitals and patient.vitals:
        section('Vitals', ', '.join(f"{k}: {v}" for k, v in patient.vitals.items() if v not in (None, '')))
    if patient.reason:
        section('Chief Complaint', patient.reason)
    if tpl.show_history and patient.medical_history:
        section('Medical History', patient.medical_history)
    if tpl.show_diagnosis and patient.diagnosis:
        section('Diagnosis', patient.diagnosis)

    page.text('Rx Prescription', bold, fs + 4, primary)
    page.skip(4)
    lines = [ln.strip() for ln in (patient.prescription or '').splitlines() if ln.strip()]
    if lines:
        for ln in lines:
            page.text(f"• {ln}", font, fs, black)
    else:
        page.text('No prescription provided', font, fs, black)
    page.skip(fs * 2)

    if tpl.footer_text:
        page.text(tpl.footer_text, font, fs - 2, secondary, 'center')
        page.skip(fs)

    # signature line on the left, QR code on the right
    block = 130
    page.need(block)
    top = page.y
    c.setFont(font, fs - 1)
    c.setFillColor(black)
    c.drawString(page.left, top - 20, '_____________________')
    c.drawString(page.left, top - 20 - fs * 1.3, doctor_name)
    if tpl.show_qr_code and portal_url:
        qr_x = page.right - 100
        qr_y = top - 100
        c.drawImage(ImageReader(io.BytesIO(qr_png(portal_url))), qr_x, qr_y, width=100, height=100)
        c.setFont(font, 8)
        c.setFillColor(secondary)
        c.drawCentredString(qr_x + 50, qr_y - 10, 'Scan to view prescription')
    page.y = top - block

    c.showPage()
    c.save()
    return buffer.getvalue()


def export_patients(hospital_id: int, since: datetime) -> bytes:
    """xlsx of the hospital's visits registered since ``since``, newest first."""
    qs = Patient.objects.filter(hospital_id=hospital_id, registered_at__gte=since).order_by('-registered_at')
    rows = []
    for p in qs:
        rows.append({
            'name': p.name,
            'registered_at': timezone.localtime(p.registered_at).strftime('%d %b %Y, %I:%M %p'),
            'phone': p.phone,
            'age': p.age,
            'gender': p.gender,
            'department': p.department,
            'reason': p.reason,
            'prescription': p.prescription or '',
            'cost': float(p.cost or 0),
            'status': p.status,
        })
    df = pd.DataFrame(rows, columns=[key for _, key, _ in EXPORT_COLUMNS])
    df.columns = [header for header, _, _ in EXPORT_COLUMNS]

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Patients')
        sheet = writer.sheets['Patients']
        for cell in sheet[1]:
            cell.font = Font(bold=True, color='FFFFFFFF')
            cell.fill = PatternFill(fill_type='solid', fgColor='FF0EA5E9')
        for idx, (_, _, width) in enumerate(EXPORT_COLUMNS, start=1):
            sheet.column_dimensions[get_column_letter(idx)].width = width
    logger.info("exported %d patients for hospital %s", len(rows), hospital_id)
    return buffer.getvalue()
