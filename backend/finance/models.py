from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

ZERO = Decimal('0.00')


def money_field(**kwargs):
    kwargs.setdefault('max_digits', 12)
    kwargs.setdefault('decimal_places', 2)
    kwargs.setdefault('default', ZERO)
    return models.DecimalField(**kwargs)


def percent_field(**kwargs):
    kwargs.setdefault('max_digits', 5)
    kwargs.setdefault('decimal_places', 2)
    kwargs.setdefault('default', ZERO)
    return models.DecimalField(**kwargs)


class FinancialRecord(models.Model):
    """Per-student, per-term ledger of charges and payments.

    Totals are derived; finance.services.ledger.refresh_totals() keeps
    remaining_balance == total_due - sum(payments) after every mutation.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PARTIALLY_PAID = 'partially paid', 'Partially paid'
        FULLY_PAID = 'fully paid', 'Fully paid'
        OVERDUE = 'overdue', 'Overdue'
        WAIVED = 'waived', 'Waived'

    class ScholarshipType(models.TextChoices):
        NONE = 'none', 'None'
        ACADEMIC = 'academic', 'Academic'
        ATHLETIC = 'athletic', 'Athletic'
        GOVERNMENT = 'government', 'Government'
        PRIVATE = 'private', 'Private'
        INSTITUTIONAL = 'institutional', 'Institutional'

    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='financial_records')
    academic_year = models.ForeignKey('academic_calendar.AcademicYear', on_delete=models.PROTECT, related_name='financial_records')
    semester = models.ForeignKey('academic_calendar.Semester', on_delete=models.PROTECT, related_name='financial_records')
    enrollment_reference = models.OneToOneField(
        'enrollment.Enrollment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='financial_record',
    )

    base_fee = money_field()
    per_unit_fee = money_field()
    total_units = models.PositiveIntegerField(default=0)
    tuition_total = money_field()

    scholarship_type = models.CharField(max_length=16, choices=ScholarshipType.choices, default=ScholarshipType.NONE)
    scholarship_name = models.CharField(max_length=128, blank=True)
    scholarship_tuition_pct = percent_field()
    scholarship_misc_pct = percent_field()
    scholarship_lab_pct = percent_field()
    scholarship_other_pct = percent_field()

    total_assessment = money_field()
    total_discounts = money_field()
    total_due = money_field()
    remaining_balance = money_field()

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-created_at',)
        constraints = [
            models.UniqueConstraint(fields=('student', 'academic_year', 'semester'), name='unique_financial_record_per_term'),
        ]

    def __str__(self):
        return f"{self.student} {self.semester} due={self.total_due} balance={self.remaining_balance}"


class FeeItem(models.Model):
    class Category(models.TextChoices):
        MISCELLANEOUS = 'misc', 'Miscellaneous'
        LABORATORY = 'lab', 'Laboratory'
        OTHER = 'other', 'Other'

    record = models.ForeignKey(FinancialRecord, on_delete=models.CASCADE, related_name='fee_items')
    category = models.CharField(max_length=8, choices=Category.choices)
    name = models.CharField(max_length=128, blank=True)
    subject_code = models.CharField(max_length=32, blank=True)
    amount = money_field()
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ('id',)

    def __str__(self):
        return f"{self.get_category_display()}: {self.name or self.subject_code} {self.amount}"


class Discount(models.Model):
    class Kind(models.TextChoices):
        ACADEMIC = 'academic', 'Academic'
        EMPLOYEE = 'employee', 'Employee'
        SIBLING = 'sibling', 'Sibling'
        PROMOTIONAL = 'promotional', 'Promotional'
        OTHER = 'other', 'Other'

    record = models.ForeignKey(FinancialRecord, on_delete=models.CASCADE, related_name='discounts')
    kind = models.CharField(max_length=16, choices=Kind.choices, default=Kind.OTHER)
    # When percentage > 0 the amount is recomputed from the total assessment.
    percentage = percent_field()
    amount = money_field()
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ('id',)


class Payment(models.Model):
    class Method(models.TextChoices):
        CASH = 'cash', 'Cash'
        CHECK = 'check', 'Check'
        BANK_TRANSFER = 'bank transfer', 'Bank transfer'
        CREDIT_CARD = 'credit card', 'Credit card'
        DEBIT_CARD = 'debit card', 'Debit card'
        ONLINE = 'online payment', 'Online payment'
        SCHOLARSHIP = 'scholarship', 'Scholarship'

    record = models.ForeignKey(FinancialRecord, on_delete=models.PROTECT, related_name='payments')
    receipt_number = models.CharField(max_length=32, unique=True)
    date = models.DateTimeField(default=timezone.now)
    amount = money_field()
    payment_method = models.CharField(max_length=16, choices=Method.choices)
    bank = models.CharField(max_length=128, blank=True)
    check_number = models.CharField(max_length=64, blank=True)
    reference_number = models.CharField(max_length=64, blank=True)
    received_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    notes = models.TextField(blank=True)
    # assessment as it stood right after this payment was posted
    total_due_at_posting = money_field()
    balance_after = money_field()
    breakdown_at_posting = models.JSONField(default=dict, blank=True)

    class Meta:
        # position in this order is the receipt index
        ordering = ('id',)

    def __str__(self):
        return f"{self.receipt_number} {self.amount}"
