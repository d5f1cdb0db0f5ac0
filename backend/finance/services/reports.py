import csv
from decimal import Decimal
from io import BytesIO, StringIO
from typing import Any, Dict, List, Tuple

from openpyxl import Workbook
from reportlab.lib.pagesizes import A5, landscape, letter
from reportlab.pdfgen import canvas

SUMMARY_COLUMNS = ['Academic Year', 'Semester', 'Students', 'Total Assessment', 'Total Discounts',
                   'Total Due', 'Total Paid', 'Total Outstanding']
STATUS_COLUMNS = ['Status', 'Records', 'Total Amount', 'Outstanding Amount']


def _plain(v: Any):
    if isinstance(v, Decimal):
        return float(v)
    return v


def summary_rows(report: Dict) -> List[Tuple[Any, ...]]:
    return [
        (r['academicYear'], r['semester'], r['studentCount'], r['totalAssessment'], r['totalDiscounts'],
         r['totalDue'], r['totalPaid'], r['totalOutstanding'])
        for r in report['summary']
    ]


def status_rows(report: Dict) -> List[Tuple[Any, ...]]:
    return [(r['status'], r['count'], r['totalAmount'], r['outstandingAmount']) for r in report['statusBreakdown']]


def summary_workbook(report: Dict) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = 'summary'
    ws.append(SUMMARY_COLUMNS)
    for r in summary_rows(report):
        ws.append([_plain(v) for v in r])

    ws2 = wb.create_sheet('status')
    ws2.append(STATUS_COLUMNS)
    for r in status_rows(report):
        ws2.append([_plain(v) for v in r])

    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.getvalue()


def summary_csv(report: Dict) -> bytes:
    sio = StringIO()
    writer = csv.writer(sio)
    writer.writerow(SUMMARY_COLUMNS)
    for r in summary_rows(report):
        writer.writerow([_plain(v) for v in r])
    return sio.getvalue().encode('utf-8-sig')


def summary_pdf(report: Dict) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=landscape(letter))
    width, height = landscape(letter)
    c.setFont('Helvetica-Bold', 12)
    c.drawString(24, height - 24, 'Financial summary')

    col_w = (width - 48) / len(SUMMARY_COLUMNS)
    y = height - 44
    c.setFont('Helvetica-Bold', 8)
    for i, col in enumerate(SUMMARY_COLUMNS):
        c.drawString(24 + i * col_w, y, col)
    c.setFont('Helvetica', 8)
    for row in summary_rows(report):
        y -= 12
        if y < 24:
            c.showPage()
            c.setFont('Helvetica', 8)
            y = height - 24
        for i, v in enumerate(row):
            c.drawString(24 + i * col_w, y, str(v)[:30])
    c.showPage()
    c.save()
    return buf.getvalue()


def _amount(v) -> str:
    if v is None:
        return '-'
    return f"{Decimal(v):,.2f}"


def render_receipt_pdf(receipt: Dict) -> bytes:
    """Official receipt for one payment, laid out on an A5 landscape page."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=landscape(A5))
    width, height = landscape(A5)

    c.setFont('Helvetica-Bold', 14)
    c.drawString(30, height - 36, 'OFFICIAL RECEIPT')
    c.setFont('Helvetica', 9)
    c.drawRightString(width - 30, height - 36, f"No. {receipt['receiptNumber']}")

    details = receipt['paymentDetails']
    lines = [
        ('Date', receipt['date'].strftime('%Y-%m-%d %H:%M') if hasattr(receipt['date'], 'strftime') else receipt['date']),
        ('Student', f"{receipt['studentName']} ({receipt['studentId']})"),
        ('Term', f"{receipt['academicYear']} / {receipt['semester']}"),
        ('Method', details['method']),
        ('Reference', details['reference'] or '-'),
        ('Received by', details['receivedBy'] or '-'),
    ]
    y = height - 64
    for label, value in lines:
        c.drawString(30, y, f'{label}:')
        c.drawString(110, y, str(value))
        y -= 14

    y -= 6
    c.setFont('Helvetica-Bold', 9)
    c.drawString(30, y, 'Assessment breakdown')
    c.setFont('Helvetica', 9)
    breakdown = receipt['breakdown']
    rows = [
        ('Tuition', breakdown['tuition']),
        ('Miscellaneous', breakdown['miscellaneous']),
        ('Laboratory', breakdown['laboratory']),
        ('Other fees', breakdown['others']),
        ('Less discounts', receipt.get('discounts')),
        ('Total due', receipt['totalDue']),
        ('Previous payments', receipt['previousPayments']),
        ('This payment', receipt['currentPayment']),
        ('Remaining balance', receipt['remainingBalance']),
    ]
    for label, value in rows:
        y -= 14
        c.drawString(40, y, label)
        c.drawRightString(width - 30, y, _amount(value))

    if receipt.get('notes'):
        y -= 20
        c.drawString(30, y, f"Notes: {receipt['notes']}"[:110])

    c.showPage()
    c.save()
    return buf.getvalue()
