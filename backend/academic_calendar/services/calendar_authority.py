"""Calendar authority: current year/semester lookup and window gating.

Every window check takes an optional `now` (aware datetime or plain date) and
falls back to the wall clock at call time. Window bounds are inclusive dates.
"""
import datetime
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from academic_calendar.models import AcademicYear, HolidayBreak, Semester
from registrar.exceptions import ConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentWindow:
    open: bool
    is_late: bool = False
    penalty_fee: Decimal = Decimal('0')

    def as_dict(self):
        return {'open': self.open, 'isLate': self.is_late, 'penaltyFee': self.penalty_fee}


CLOSED = EnrollmentWindow(open=False)


def _as_date(now=None) -> datetime.date:
    if now is None:
        return timezone.localdate()
    if isinstance(now, datetime.datetime):
        if timezone.is_aware(now):
            return timezone.localdate(now)
        return now.date()
    return now


def current_academic_year() -> Optional[AcademicYear]:
    return AcademicYear.objects.filter(is_current_year=True).first()


def current_semester(today=None, academic_year: Optional[AcademicYear] = None) -> Optional[Semester]:
    """Semester of the current year that is ongoing, preferring one whose dates contain today."""
    year = academic_year or current_academic_year()
    if year is None:
        return None
    day = _as_date(today)
    semesters = list(year.semesters.all())

    ongoing = [s for s in semesters if s.status == Semester.Status.ONGOING]
    for s in ongoing:
        if s.contains(day):
            return s
    if ongoing:
        return ongoing[0]
    for s in semesters:
        if s.contains(day):
            return s
    return None


def enrollment_window(now=None, semester: Optional[Semester] = None) -> EnrollmentWindow:
    """Regular window -> open; after it until the late window ends -> open and late; else closed."""
    day = _as_date(now)
    if semester is None:
        semester = current_semester(day)
    if semester is None:
        return CLOSED

    start, end = semester.enrollment_start, semester.enrollment_end
    if start and end and start <= day <= end:
        return EnrollmentWindow(open=True, is_late=False, penalty_fee=Decimal('0'))

    late_end = semester.late_enrollment_end
    if end and late_end and end < day <= late_end:
        return EnrollmentWindow(open=True, is_late=True, penalty_fee=Decimal(semester.late_penalty_fee or 0))

    return CLOSED


def add_drop_window(semester: Optional[Semester], now=None, actor_is_admin: bool = False) -> bool:
    if actor_is_admin:
        return True
    if semester is None or not semester.add_drop_start or not semester.add_drop_end:
        return False
    day = _as_date(now)
    return semester.add_drop_start <= day <= semester.add_drop_end


@transaction.atomic
def set_current_year(year: AcademicYear) -> AcademicYear:
    """Make `year` the only current academic year."""
    # lock every flagged row so concurrent switches serialize
    list(AcademicYear.objects.select_for_update().filter(is_current_year=True))
    AcademicYear.objects.filter(is_current_year=True).exclude(pk=year.pk).update(is_current_year=False)
    if not year.is_current_year:
        year.is_current_year = True
        year.save(update_fields=['is_current_year', 'updated_at'])
    logger.info('Academic year %s set as current', year.name)
    return year


def _default_semesters(y: int):
    d = datetime.date
    return [
        dict(
            name=Semester.Name.FIRST, order=1,
            start_date=d(y, 6, 1), end_date=d(y, 10, 31),
            enrollment_start=d(y, 5, 15), enrollment_end=d(y, 6, 15),
            late_enrollment_start=d(y, 6, 16), late_enrollment_end=d(y, 6, 30),
            late_penalty_fee=Decimal('500'),
            add_drop_start=d(y, 6, 16), add_drop_end=d(y, 7, 15),
            midterm_start=d(y, 8, 1), midterm_end=d(y, 8, 15),
            finals_start=d(y, 10, 15), finals_end=d(y, 10, 31),
            grade_submission_deadline=d(y, 11, 15),
            status=Semester.Status.ONGOING,
        ),
        dict(
            name=Semester.Name.SECOND, order=2,
            start_date=d(y, 11, 15), end_date=d(y + 1, 3, 31),
            enrollment_start=d(y, 10, 15), enrollment_end=d(y, 11, 30),
            late_enrollment_start=d(y, 12, 1), late_enrollment_end=d(y, 12, 15),
            late_penalty_fee=Decimal('500'),
            add_drop_start=d(y, 12, 1), add_drop_end=d(y, 12, 31),
            midterm_start=d(y + 1, 1, 15), midterm_end=d(y + 1, 1, 31),
            finals_start=d(y + 1, 3, 15), finals_end=d(y + 1, 3, 31),
            grade_submission_deadline=d(y + 1, 4, 15),
            status=Semester.Status.PENDING,
        ),
        dict(
            name=Semester.Name.SUMMER, order=3,
            start_date=d(y + 1, 4, 15), end_date=d(y + 1, 5, 31),
            enrollment_start=d(y + 1, 4, 1), enrollment_end=d(y + 1, 4, 15),
            late_enrollment_start=d(y + 1, 4, 16), late_enrollment_end=d(y + 1, 4, 20),
            late_penalty_fee=Decimal('300'),
            add_drop_start=d(y + 1, 4, 16), add_drop_end=d(y + 1, 4, 25),
            midterm_start=d(y + 1, 5, 1), midterm_end=d(y + 1, 5, 7),
            finals_start=d(y + 1, 5, 25), finals_end=d(y + 1, 5, 31),
            grade_submission_deadline=d(y + 1, 6, 7),
            status=Semester.Status.PENDING,
        ),
    ]


@transaction.atomic
def default_calendar(start_year: Optional[int] = None) -> AcademicYear:
    """Create the standard June-May year with 1st, 2nd and Summer terms.

    Refuses to run once any academic year exists.
    """
    existing = AcademicYear.objects.count()
    if existing:
        raise ConflictError('Academic years are already initialized', conflicts=[{'count': existing}])

    y = start_year or timezone.localdate().year
    year = AcademicYear.objects.create(
        name=f'{y}-{y + 1}',
        start_date=datetime.date(y, 6, 1),
        end_date=datetime.date(y + 1, 5, 31),
        status=AcademicYear.Status.ONGOING,
    )
    for fields in _default_semesters(y):
        Semester.objects.create(academic_year=year, **fields)
    set_current_year(year)
    logger.info('Default academic calendar %s initialized', year.name)
    return year


@transaction.atomic
def create_academic_year(data: dict, semesters=None) -> AcademicYear:
    name = data.get('name')
    if AcademicYear.objects.filter(name=name).exists():
        raise ConflictError('Academic year with this name already exists', conflicts=[{'name': name}])
    make_current = bool(data.pop('is_current_year', False))
    try:
        year = AcademicYear.objects.create(**data)
    except IntegrityError:
        raise ConflictError('Academic year with this name already exists', conflicts=[{'name': name}])
    for sem in semesters or []:
        add_semester(year, dict(sem))
    if make_current:
        set_current_year(year)
    return year


@transaction.atomic
def update_academic_year(year: AcademicYear, data: dict) -> AcademicYear:
    year = AcademicYear.objects.select_for_update().get(pk=year.pk)
    name = data.get('name')
    if name and AcademicYear.objects.filter(name=name).exclude(pk=year.pk).exists():
        raise ConflictError('Academic year with this name already exists', conflicts=[{'name': name}])
    make_current = data.pop('is_current_year', None)
    for field, value in data.items():
        setattr(year, field, value)
    if make_current is False:
        year.is_current_year = False
    year.save()
    if make_current:
        set_current_year(year)
    return year


@transaction.atomic
def add_semester(year: AcademicYear, data: dict) -> Semester:
    name = data.get('name')
    if year.semesters.filter(name=name).exists():
        raise ConflictError('Semester already exists for this academic year', conflicts=[{'semester': name}])
    breaks = data.pop('holiday_breaks', None) or []
    if 'order' not in data:
        data['order'] = year.semesters.count() + 1
    semester = Semester.objects.create(academic_year=year, **data)
    for b in breaks:
        HolidayBreak.objects.create(semester=semester, **b)
    return semester


@transaction.atomic
def update_semester(semester: Semester, data: dict) -> Semester:
    semester = Semester.objects.select_for_update().get(pk=semester.pk)
    breaks = data.pop('holiday_breaks', None)
    data.pop('name', None)
    for field, value in data.items():
        setattr(semester, field, value)
    semester.save()
    if breaks is not None:
        semester.holiday_breaks.all().delete()
        for b in breaks:
            HolidayBreak.objects.create(semester=semester, **b)
    return semester
