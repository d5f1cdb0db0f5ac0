from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Enrollment(models.Model):
    """A student's subject registration for one academic year + semester."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='enrollments')
    academic_year = models.ForeignKey('academic_calendar.AcademicYear', on_delete=models.PROTECT, related_name='enrollments')
    semester = models.ForeignKey('academic_calendar.Semester', on_delete=models.PROTECT, related_name='enrollments')
    year_level = models.PositiveSmallIntegerField(null=True, blank=True)
    department = models.ForeignKey('catalog.Department', on_delete=models.PROTECT, null=True, blank=True, related_name='enrollments')

    enrollment_status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    date_submitted = models.DateTimeField(default=timezone.now)
    date_approved = models.DateTimeField(null=True, blank=True)
    date_rejected = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    rejected_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    rejection_reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    is_late = models.BooleanField(default=False)
    late_penalty_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-date_submitted',)
        constraints = [
            models.UniqueConstraint(fields=('student', 'academic_year', 'semester'), name='unique_enrollment_per_term'),
        ]

    def __str__(self):
        return f"{self.student} {self.semester} ({self.enrollment_status})"

    def enrolled_lines(self):
        return self.subject_lines.filter(status=SubjectLine.Status.ENROLLED)


class SubjectLine(models.Model):
    """Append-only line item; a drop flips the status and keeps the row."""

    class Status(models.TextChoices):
        ENROLLED = 'enrolled', 'Enrolled'
        DROPPED = 'dropped', 'Dropped'

    enrollment = models.ForeignKey(Enrollment, on_delete=models.CASCADE, related_name='subject_lines')
    subject = models.ForeignKey('catalog.Subject', on_delete=models.PROTECT, related_name='subject_lines')
    section = models.CharField(max_length=16, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ENROLLED)
    remarks = models.CharField(max_length=255, blank=True)
    order = models.PositiveIntegerField(default=0)
    added_at = models.DateTimeField(default=timezone.now)
    dropped_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ('enrollment', 'order', 'id')

    def __str__(self):
        return f"{self.subject_id} [{self.status}]"


class EnrollmentAction(models.Model):
    class Action(models.TextChoices):
        SUBMITTED = 'SUBMITTED', 'Submitted'
        APPROVED = 'APPROVED', 'Approved'
        REJECTED = 'REJECTED', 'Rejected'
        SUBJECT_ADDED = 'SUBJECT_ADDED', 'Subject added'
        SUBJECT_DROPPED = 'SUBJECT_DROPPED', 'Subject dropped'

    enrollment = models.ForeignKey(Enrollment, on_delete=models.CASCADE, related_name='actions')
    acted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='enrollment_actions'
    )
    action = models.CharField(max_length=20, choices=Action.choices)
    remarks = models.TextField(blank=True)
    acted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ('acted_at', 'id')

    def __str__(self):
        return f"{self.enrollment_id} {self.action} by {self.acted_by_id}"
