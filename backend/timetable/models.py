from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

# 0 = Sunday, matching JavaScript-style day numbering used by the clients
DAYS_OF_WEEK = (
    (0, 'Sunday'),
    (1, 'Monday'),
    (2, 'Tuesday'),
    (3, 'Wednesday'),
    (4, 'Thursday'),
    (5, 'Friday'),
    (6, 'Saturday'),
)

MINUTES_PER_DAY = 1440


def format_minutes(total_minutes: int) -> str:
    """570 -> '9:30 AM'."""
    hours, minutes = divmod(int(total_minutes), 60)
    period = 'PM' if hours >= 12 else 'AM'
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


class ScheduleBlock(models.Model):
    """A weekly room/teacher booking for one course section.

    Times are minute offsets from midnight and describe the half-open
    interval [start_time, end_time).
    """

    class ScheduleType(models.TextChoices):
        LECTURE = 'lecture', 'Lecture'
        LABORATORY = 'laboratory', 'Laboratory'
        TUTORIAL = 'tutorial', 'Tutorial'
        EXAM = 'exam', 'Exam'
        OTHER = 'other', 'Other'

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'

    course = models.ForeignKey('catalog.Subject', on_delete=models.PROTECT, related_name='schedule_blocks')
    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='schedule_blocks')
    academic_year = models.ForeignKey('academic_calendar.AcademicYear', on_delete=models.PROTECT, related_name='schedule_blocks')
    section = models.CharField(max_length=16, default='A')
    schedule_type = models.CharField(max_length=16, choices=ScheduleType.choices, default=ScheduleType.LECTURE)
    room = models.CharField(max_length=64)
    day_of_week = models.PositiveSmallIntegerField(choices=DAYS_OF_WEEK, validators=[MaxValueValidator(6)])
    start_time = models.PositiveSmallIntegerField(validators=[MaxValueValidator(MINUTES_PER_DAY - 1)])
    # 1440 is midnight at the end of the day
    end_time = models.PositiveSmallIntegerField(validators=[MaxValueValidator(MINUTES_PER_DAY)])
    is_recurring = models.BooleanField(default=True)
    specific_date = models.DateField(null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    # Stored for the recurrence; the conflict check does not consult them.
    except_dates = models.JSONField(default=list, blank=True)
    capacity = models.PositiveIntegerField(default=40, validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('day_of_week', 'start_time')
        indexes = [
            models.Index(fields=['room', 'day_of_week'], name='schedule_room_day_idx'),
            models.Index(fields=['teacher', 'day_of_week'], name='schedule_teacher_day_idx'),
            models.Index(fields=['course', 'academic_year'], name='schedule_course_year_idx'),
        ]

    def __str__(self):
        return f"{self.course_id} {self.room} {self.day_name} {self.formatted_start_time}-{self.formatted_end_time}"

    @property
    def day_name(self) -> str:
        return dict(DAYS_OF_WEEK).get(self.day_of_week, '')

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def formatted_start_time(self) -> str:
        return format_minutes(self.start_time)

    @property
    def formatted_end_time(self) -> str:
        return format_minutes(self.end_time)


class ScheduleSlotLock(models.Model):
    """One row per (resource, day); writers lock it before checking for overlaps."""

    class ResourceKind(models.TextChoices):
        ROOM = 'room', 'Room'
        TEACHER = 'teacher', 'Teacher'

    resource_kind = models.CharField(max_length=8, choices=ResourceKind.choices)
    resource_key = models.CharField(max_length=64)
    day_of_week = models.PositiveSmallIntegerField(choices=DAYS_OF_WEEK)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=('resource_kind', 'resource_key', 'day_of_week'), name='unique_schedule_slot_lock'),
        ]

    def __str__(self):
        return f"{self.resource_kind}:{self.resource_key}@{self.day_of_week}"
