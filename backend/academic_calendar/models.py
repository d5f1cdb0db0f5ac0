from django.db import models
from django.db.models import Q


class AcademicYear(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ONGOING = 'ongoing', 'Ongoing'
        COMPLETED = 'completed', 'Completed'

    name = models.CharField(max_length=32, unique=True)
    start_date = models.DateField()
    end_date = models.DateField()
    # At most one row may carry the flag; enforced by the partial unique constraint below
    # and flipped through calendar_authority.set_current_year().
    is_current_year = models.BooleanField(default=False)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Academic Year'
        verbose_name_plural = 'Academic Years'
        ordering = ('-start_date',)
        constraints = [
            models.UniqueConstraint(
                fields=['is_current_year'],
                condition=Q(is_current_year=True),
                name='unique_current_academic_year',
            ),
        ]

    def __str__(self):
        return f"{self.name}{' (current)' if self.is_current_year else ''}"


class Semester(models.Model):
    class Name(models.TextChoices):
        FIRST = '1st', '1st'
        SECOND = '2nd', '2nd'
        SUMMER = 'Summer', 'Summer'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ONGOING = 'ongoing', 'Ongoing'
        COMPLETED = 'completed', 'Completed'

    academic_year = models.ForeignKey(AcademicYear, on_delete=models.PROTECT, related_name='semesters')
    name = models.CharField(max_length=8, choices=Name.choices)
    order = models.PositiveSmallIntegerField(default=0)

    start_date = models.DateField()
    end_date = models.DateField()

    enrollment_start = models.DateField(null=True, blank=True)
    enrollment_end = models.DateField(null=True, blank=True)
    late_enrollment_start = models.DateField(null=True, blank=True)
    late_enrollment_end = models.DateField(null=True, blank=True)
    late_penalty_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    add_drop_start = models.DateField(null=True, blank=True)
    add_drop_end = models.DateField(null=True, blank=True)
    midterm_start = models.DateField(null=True, blank=True)
    midterm_end = models.DateField(null=True, blank=True)
    finals_start = models.DateField(null=True, blank=True)
    finals_end = models.DateField(null=True, blank=True)
    grade_submission_deadline = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    class Meta:
        ordering = ('academic_year', 'order', 'start_date')
        constraints = [
            models.UniqueConstraint(fields=('academic_year', 'name'), name='unique_semester_per_year'),
        ]

    def __str__(self):
        return f"{self.academic_year.name} {self.name}"

    def contains(self, day) -> bool:
        return self.start_date <= day <= self.end_date


class HolidayBreak(models.Model):
    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name='holiday_breaks')
    name = models.CharField(max_length=128)
    start_date = models.DateField()
    end_date = models.DateField()

    class Meta:
        ordering = ('start_date',)

    def __str__(self):
        return f"{self.name} ({self.start_date} - {self.end_date})"
