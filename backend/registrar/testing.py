"""Fixture builders shared by the app test suites."""
import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model

from accounts.models import Role
from catalog.models import Department, Subject


def make_user(username, *roles, department=None, year_level=None, **extra):
    User = get_user_model()
    user = User.objects.create_user(username=username, password='pass1234', department=department,
                                    year_level=year_level, **extra)
    for name in roles:
        role, _ = Role.objects.get_or_create(name=name)
        user.roles.add(role)
    return user


def make_department(code='CS', name='Computer Science'):
    dept, _ = Department.objects.get_or_create(code=code, defaults={'name': name, 'short_name': code})
    return dept


def make_subject(code, department, lecture_units=3, laboratory_units=0, total_units=None, **extra):
    return Subject.objects.create(
        code=code,
        title=extra.pop('title', code),
        department=department,
        lecture_units=lecture_units,
        laboratory_units=laboratory_units,
        total_units=total_units if total_units is not None else 0,
        **extra,
    )


def make_year(name='2025-2026', start_year=2025, current=True):
    from academic_calendar.models import AcademicYear

    return AcademicYear.objects.create(
        name=name,
        start_date=datetime.date(start_year, 6, 1),
        end_date=datetime.date(start_year + 1, 5, 31),
        is_current_year=current,
        status=AcademicYear.Status.ONGOING if current else AcademicYear.Status.PENDING,
    )


def make_semester(year, name='1st', start_year=2025, **overrides):
    """First semester laid out like the default calendar."""
    from academic_calendar.models import Semester

    d = datetime.date
    fields = dict(
        order=1,
        start_date=d(start_year, 6, 1),
        end_date=d(start_year, 10, 31),
        enrollment_start=d(start_year, 5, 15),
        enrollment_end=d(start_year, 6, 15),
        late_enrollment_start=d(start_year, 6, 16),
        late_enrollment_end=d(start_year, 6, 30),
        late_penalty_fee=Decimal('500'),
        add_drop_start=d(start_year, 6, 16),
        add_drop_end=d(start_year, 7, 15),
        status=Semester.Status.ONGOING,
    )
    fields.update(overrides)
    return Semester.objects.create(academic_year=year, name=name, **fields)


def at(year, month, day, hour=12):
    """Aware datetime at local noon, for calendar gate checks."""
    from django.utils import timezone

    return timezone.make_aware(datetime.datetime(year, month, day, hour, 0))
