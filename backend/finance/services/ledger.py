"""Financial ledger: charge computation, payments, receipts and recalculation.

The ledger never inspects enrollment state. When a payment settles a
balance it sends `finance.signals.balance_settled` and lets subscribers
react inside the same transaction.
"""
import logging
import secrets
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from finance.models import ZERO, Discount, FeeItem, FinancialRecord, Payment
from finance.signals import balance_settled
from registrar.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT_UNITS = 3

# (name, amount, description)
MISCELLANEOUS_FEES: Tuple[Tuple[str, Decimal, str], ...] = (
    ('Registration', Decimal('500'), 'One-time registration fee per semester'),
    ('Library', Decimal('300'), 'Access to library resources'),
    ('Computer', Decimal('500'), 'Access to computer laboratories'),
)

HUNDRED = Decimal('100')
CENT = Decimal('0.01')


def per_unit_fee() -> Decimal:
    return Decimal(str(getattr(settings, 'REGISTRAR_PER_UNIT_FEE', '1000')))


def lab_fee_per_unit() -> Decimal:
    return Decimal(str(getattr(settings, 'REGISTRAR_LAB_FEE_PER_UNIT', '500')))


def _q(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value) -> Optional[Decimal]:
    """Parse a client amount; None when it is not a finite number."""
    if value is None or value == '':
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return _q(amount)


@dataclass
class Charges:
    total_units: int
    per_unit_fee: Decimal
    tuition_total: Decimal
    laboratory_fees: List[Tuple[str, Decimal]] = field(default_factory=list)
    miscellaneous_fees: List[Tuple[str, Decimal, str]] = field(default_factory=list)

    @property
    def laboratory_total(self) -> Decimal:
        return sum((amount for _, amount in self.laboratory_fees), ZERO)

    @property
    def miscellaneous_total(self) -> Decimal:
        return sum((amount for _, amount, _ in self.miscellaneous_fees), ZERO)

    @property
    def total(self) -> Decimal:
        return self.tuition_total + self.laboratory_total + self.miscellaneous_total


def _subject_units(subject) -> Tuple[int, int]:
    total = getattr(subject, 'total_units', 0) or DEFAULT_SUBJECT_UNITS
    lab = getattr(subject, 'laboratory_units', 0) or 0
    return int(total), int(lab)


def compute_charges(subjects: Iterable) -> Charges:
    """Tuition from billable units, a lab fee per subject with lab units, and the fixed misc fees."""
    unit_fee = per_unit_fee()
    lab_fee = lab_fee_per_unit()
    total_units = 0
    lab_fees = []
    for subject in subjects:
        units, lab_units = _subject_units(subject)
        total_units += units
        if lab_units > 0:
            lab_fees.append((subject.code, _q(lab_units * lab_fee)))
    return Charges(
        total_units=total_units,
        per_unit_fee=unit_fee,
        tuition_total=_q(total_units * unit_fee),
        laboratory_fees=lab_fees,
        miscellaneous_fees=list(MISCELLANEOUS_FEES),
    )


def _fee_total(record: FinancialRecord, category: str) -> Decimal:
    return record.fee_items.filter(category=category).aggregate(s=Sum('amount'))['s'] or ZERO


def refresh_totals(record: FinancialRecord, save: bool = True) -> FinancialRecord:
    """Recompute every derived total and the status from the record's rows."""
    record.tuition_total = _q(record.base_fee + record.per_unit_fee * record.total_units)
    misc = _fee_total(record, FeeItem.Category.MISCELLANEOUS)
    lab = _fee_total(record, FeeItem.Category.LABORATORY)
    other = _fee_total(record, FeeItem.Category.OTHER)
    record.total_assessment = _q(record.tuition_total + misc + lab + other)

    discount_total = ZERO
    for discount in record.discounts.all():
        if discount.percentage > 0:
            amount = _q(record.total_assessment * discount.percentage / HUNDRED)
            if amount != discount.amount:
                discount.amount = amount
                discount.save(update_fields=['amount'])
        discount_total += discount.amount

    scholarship = ZERO
    if record.scholarship_type != FinancialRecord.ScholarshipType.NONE:
        scholarship = (
            record.tuition_total * record.scholarship_tuition_pct
            + misc * record.scholarship_misc_pct
            + lab * record.scholarship_lab_pct
            + other * record.scholarship_other_pct
        ) / HUNDRED

    record.total_discounts = _q(discount_total + scholarship)
    record.total_due = _q(record.total_assessment - record.total_discounts)
    paid = record.payments.aggregate(s=Sum('amount'))['s'] or ZERO
    record.remaining_balance = _q(record.total_due - paid)

    if record.remaining_balance <= 0:
        record.status = FinancialRecord.Status.FULLY_PAID
    elif paid > 0:
        record.status = FinancialRecord.Status.PARTIALLY_PAID
    elif record.due_date and record.due_date < timezone.localdate():
        record.status = FinancialRecord.Status.OVERDUE
    elif record.status != FinancialRecord.Status.WAIVED:
        record.status = FinancialRecord.Status.PENDING

    if save:
        record.save()
    return record


def _replace_lab_fees(record: FinancialRecord, charges: Charges):
    record.fee_items.filter(category=FeeItem.Category.LABORATORY).delete()
    FeeItem.objects.bulk_create([
        FeeItem(record=record, category=FeeItem.Category.LABORATORY, subject_code=code, name=code, amount=amount,
                description='Laboratory fee')
        for code, amount in charges.laboratory_fees
    ])


@transaction.atomic
def open_record(enrollment, subjects: Iterable, created_by=None) -> FinancialRecord:
    """Create the charge record for a freshly submitted enrollment."""
    charges = compute_charges(subjects)
    record = FinancialRecord.objects.create(
        student=enrollment.student,
        academic_year=enrollment.academic_year,
        semester=enrollment.semester,
        enrollment_reference=enrollment,
        per_unit_fee=charges.per_unit_fee,
        total_units=charges.total_units,
        tuition_total=charges.tuition_total,
        created_by=created_by,
        updated_by=created_by,
    )
    FeeItem.objects.bulk_create([
        FeeItem(record=record, category=FeeItem.Category.MISCELLANEOUS, name=name, amount=amount, description=desc)
        for name, amount, desc in charges.miscellaneous_fees
    ])
    _replace_lab_fees(record, charges)
    refresh_totals(record)
    logger.info('Financial record %s opened for student %s: units=%s due=%s',
                record.pk, record.student_id, record.total_units, record.total_due)
    return record


def _new_receipt_number() -> str:
    today = timezone.localdate().strftime('%Y%m%d')
    while True:
        candidate = f"R-{today}-{secrets.token_hex(4).upper()}"
        if not Payment.objects.filter(receipt_number=candidate).exists():
            return candidate


@transaction.atomic
def add_payment(record: FinancialRecord, amount, payment_method: str, received_by=None, **details) -> Payment:
    """Append a payment and refresh totals; announce settlement when the balance reaches zero."""
    value = to_money(amount)
    if value is None or value <= 0:
        raise ValidationError('Payment amount must be greater than zero')
    if payment_method not in Payment.Method.values:
        raise ValidationError(f'Invalid payment method: {payment_method}')

    record = FinancialRecord.objects.select_for_update().get(pk=record.pk)
    payment = Payment.objects.create(
        record=record,
        receipt_number=_new_receipt_number(),
        amount=value,
        payment_method=payment_method,
        bank=details.get('bank') or '',
        check_number=details.get('check_number') or '',
        reference_number=details.get('reference_number') or '',
        notes=details.get('notes') or '',
        received_by=received_by,
    )
    record.updated_by = received_by
    refresh_totals(record)
    payment.total_due_at_posting = record.total_due
    payment.balance_after = record.remaining_balance
    payment.breakdown_at_posting = {key: str(value) for key, value in _breakdown(record).items()}
    payment.save(update_fields=['total_due_at_posting', 'balance_after', 'breakdown_at_posting'])
    logger.info('Payment %s of %s posted to record %s by %s; remaining=%s',
                payment.receipt_number, value, record.pk, getattr(received_by, 'username', None),
                record.remaining_balance)

    if record.remaining_balance <= 0:
        balance_settled.send(
            sender=FinancialRecord,
            record=record,
            enrollment_id=record.enrollment_reference_id,
            recorded_by=received_by,
        )
    return payment


def _person_name(user) -> Optional[str]:
    if user is None:
        return None
    return user.get_full_name() or user.username


def _breakdown(record: FinancialRecord) -> Dict[str, Decimal]:
    return {
        'tuition': record.tuition_total,
        'miscellaneous': _fee_total(record, FeeItem.Category.MISCELLANEOUS),
        'laboratory': _fee_total(record, FeeItem.Category.LABORATORY),
        'others': _fee_total(record, FeeItem.Category.OTHER),
        'discounts': record.total_discounts,
    }


def generate_receipt(record: FinancialRecord, payment_index) -> Dict:
    """Read-only projection of one payment.

    Amounts come from the snapshot taken when the payment was posted, so a
    receipt keeps its content after later add/drop or adjustments.
    """
    payments = list(record.payments.select_related('received_by').order_by('id'))
    try:
        index = int(payment_index)
    except (TypeError, ValueError):
        raise NotFoundError('Payment not found')
    if index < 0 or index >= len(payments):
        raise NotFoundError('Payment not found')

    payment = payments[index]
    previous = sum((p.amount for p in payments[:index]), ZERO)
    breakdown = {key: Decimal(value) for key, value in (payment.breakdown_at_posting or {}).items()}
    discounts = breakdown.pop('discounts', ZERO)
    student = record.student
    return {
        'receiptNumber': payment.receipt_number,
        'studentId': student.student_number or 'N/A',
        'studentName': _person_name(student),
        'date': payment.date,
        'academicYear': record.academic_year.name,
        'semester': record.semester.name,
        'paymentDetails': {
            'amount': payment.amount,
            'method': payment.payment_method,
            'reference': payment.reference_number or payment.check_number or None,
            'receivedBy': _person_name(payment.received_by),
        },
        'breakdown': breakdown,
        'discounts': discounts,
        'totalDue': payment.total_due_at_posting,
        'previousPayments': previous,
        'currentPayment': payment.amount,
        'remainingBalance': payment.balance_after,
        'notes': payment.notes,
    }


@transaction.atomic
def recalc_on_add_drop(record: FinancialRecord, subjects: Iterable, actor=None) -> FinancialRecord:
    """Re-price tuition and lab fees for the current subject set; payments are untouched."""
    record = FinancialRecord.objects.select_for_update().get(pk=record.pk)
    previously_paid = record.total_due - record.remaining_balance
    charges = compute_charges(subjects)
    record.total_units = charges.total_units
    _replace_lab_fees(record, charges)
    if actor is not None:
        record.updated_by = actor
    refresh_totals(record)
    logger.info('Record %s re-priced after add/drop: units=%s due=%s paid=%s remaining=%s',
                record.pk, record.total_units, record.total_due, previously_paid, record.remaining_balance)
    return record


@transaction.atomic
def update_record(record: FinancialRecord, data: Dict, actor=None) -> FinancialRecord:
    """Administrative adjustments: discounts, scholarship, extra fees, due date, status, notes."""
    record = FinancialRecord.objects.select_for_update().get(pk=record.pk)
    for name in ('base_fee', 'due_date', 'notes', 'status', 'scholarship_type', 'scholarship_name',
                 'scholarship_tuition_pct', 'scholarship_misc_pct', 'scholarship_lab_pct', 'scholarship_other_pct'):
        if name in data:
            setattr(record, name, data[name])

    if 'discounts' in data:
        record.discounts.all().delete()
        for d in data['discounts']:
            Discount.objects.create(record=record, **d)

    for key, category in (('miscellaneous_fees', FeeItem.Category.MISCELLANEOUS),
                          ('other_fees', FeeItem.Category.OTHER)):
        if key in data:
            record.fee_items.filter(category=category).delete()
            for item in data[key]:
                FeeItem.objects.create(record=record, category=category, **item)

    record.updated_by = actor
    refresh_totals(record)
    logger.info('Record %s adjusted by %s; due=%s remaining=%s', record.pk,
                getattr(actor, 'username', None), record.total_due, record.remaining_balance)
    return record


def _filtered(academic_year=None, semester=None):
    qs = FinancialRecord.objects.all()
    if academic_year:
        qs = qs.filter(academic_year_id=academic_year)
    if semester:
        if str(semester).isdigit():
            qs = qs.filter(semester_id=semester)
        else:
            qs = qs.filter(semester__name=semester)
    return qs


def financial_summary(academic_year=None, semester=None) -> Dict:
    qs = _filtered(academic_year, semester)
    rows = (
        qs.values('academic_year__name', 'semester__name')
        .annotate(
            total_assessment=Sum('total_assessment'),
            total_discounts=Sum('total_discounts'),
            total_due=Sum('total_due'),
            total_outstanding=Sum('remaining_balance'),
            student_count=Count('id'),
        )
        .order_by('-academic_year__name', 'semester__name')
    )
    summary = []
    for r in rows:
        due = r['total_due'] or ZERO
        outstanding = r['total_outstanding'] or ZERO
        summary.append({
            'academicYear': r['academic_year__name'],
            'semester': r['semester__name'],
            'totalAssessment': r['total_assessment'] or ZERO,
            'totalDiscounts': r['total_discounts'] or ZERO,
            'totalDue': due,
            'totalPaid': due - outstanding,
            'totalOutstanding': outstanding,
            'studentCount': r['student_count'],
        })

    breakdown = [
        {
            'status': r['status'],
            'count': r['count'],
            'totalAmount': r['total_amount'] or ZERO,
            'outstandingAmount': r['outstanding_amount'] or ZERO,
        }
        for r in qs.values('status').annotate(
            count=Count('id'), total_amount=Sum('total_due'), outstanding_amount=Sum('remaining_balance')
        ).order_by('status')
    ]
    return {'summary': summary, 'statusBreakdown': breakdown}


def list_totals(qs) -> Dict:
    agg = qs.aggregate(total=Sum('total_assessment'), due=Sum('total_due'), outstanding=Sum('remaining_balance'))
    due = agg['due'] or ZERO
    outstanding = agg['outstanding'] or ZERO
    return {
        'totalAssessment': agg['total'] or ZERO,
        'totalCollected': due - outstanding,
        'totalOutstanding': outstanding,
    }
