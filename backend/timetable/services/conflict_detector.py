"""Room/teacher double-booking detection for weekly schedule blocks.

Writers lock the ScheduleSlotLock rows for {room, day} and {teacher, day}
before re-running the overlap query, so two concurrent bookings of the same
slot cannot both pass the check.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from django.db import IntegrityError, transaction

from accounts.utils import is_teacher
from timetable.models import MINUTES_PER_DAY, ScheduleBlock, ScheduleSlotLock
from registrar.exceptions import ValidationError, ConflictError

logger = logging.getLogger(__name__)

ROOM_CONFLICT_MESSAGE = 'Room scheduling conflict detected'
TEACHER_CONFLICT_MESSAGE = 'Teacher scheduling conflict detected'

_BLOCK_FIELDS = (
    'course', 'teacher', 'academic_year', 'section', 'schedule_type', 'room', 'day_of_week',
    'start_time', 'end_time', 'is_recurring', 'specific_date', 'start_date', 'end_date',
    'except_dates', 'capacity', 'notes', 'status',
)


def intervals_overlap(s1: int, e1: int, s2: int, e2: int) -> bool:
    """Half-open [s1, e1) vs [s2, e2); touching endpoints do not overlap."""
    return s1 < e2 and s2 < e1


def _room_key(room) -> str:
    return str(room or '').strip().lower()


def _teacher_id(teacher):
    return getattr(teacher, 'pk', teacher)


@dataclass
class ConflictReport:
    room_conflicts: List[ScheduleBlock] = field(default_factory=list)
    teacher_conflicts: List[ScheduleBlock] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.room_conflicts or self.teacher_conflicts)

    @property
    def message(self) -> Optional[str]:
        if self.room_conflicts:
            return ROOM_CONFLICT_MESSAGE
        if self.teacher_conflicts:
            return TEACHER_CONFLICT_MESSAGE
        return None

    def as_payload(self) -> List[Dict]:
        """One entry per clashing block, tagged with the resource(s) it clashes on."""
        room_ids = {b.pk for b in self.room_conflicts}
        teacher_ids = {b.pk for b in self.teacher_conflicts}
        seen = set()
        out = []
        for block in self.room_conflicts + self.teacher_conflicts:
            if block.pk in seen:
                continue
            seen.add(block.pk)
            resources = [name for name, ids in (('room', room_ids), ('teacher', teacher_ids)) if block.pk in ids]
            out.append(conflict_entry(block, resources))
        return out


def conflict_entry(block: ScheduleBlock, resources=None) -> Dict:
    entry = {
        'id': block.pk,
        'course': block.course_id,
        'course_code': getattr(block.course, 'code', None),
        'teacher': block.teacher_id,
        'room': block.room,
        'section': block.section,
        'day_of_week': block.day_of_week,
        'start_time': block.start_time,
        'end_time': block.end_time,
        'time': f"{block.formatted_start_time} - {block.formatted_end_time}",
    }
    if resources is not None:
        entry['resources'] = resources
    return entry


def _active_recurring(day_of_week: int, start_time: int, end_time: int, exclude_id=None):
    # same predicate as intervals_overlap(start_time, end_time, row.start_time, row.end_time)
    qs = ScheduleBlock.objects.select_related('course').filter(
        is_recurring=True,
        status=ScheduleBlock.Status.ACTIVE,
        day_of_week=day_of_week,
        start_time__lt=end_time,
        end_time__gt=start_time,
    )
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs


def find_conflicts(day_of_week: int, start_time: int, end_time: int, room=None, teacher=None,
                   exclude_id=None) -> ConflictReport:
    report = ConflictReport()
    base = _active_recurring(day_of_week, start_time, end_time, exclude_id)
    if _room_key(room):
        report.room_conflicts = list(base.filter(room__iexact=str(room).strip()).order_by('start_time', 'pk'))
    teacher_id = _teacher_id(teacher)
    if teacher_id:
        report.teacher_conflicts = list(base.filter(teacher_id=teacher_id).order_by('start_time', 'pk'))
    return report


def _lock_slot(kind: str, key: str, day_of_week: int):
    try:
        with transaction.atomic():
            ScheduleSlotLock.objects.get_or_create(resource_kind=kind, resource_key=key, day_of_week=day_of_week)
    except IntegrityError:
        # another writer created the row first; it exists now
        pass
    return ScheduleSlotLock.objects.select_for_update().get(resource_kind=kind, resource_key=key, day_of_week=day_of_week)


def _lock_slots(room, teacher, day_of_week: int):
    keys = []
    if _room_key(room):
        keys.append((ScheduleSlotLock.ResourceKind.ROOM, _room_key(room)))
    if _teacher_id(teacher):
        keys.append((ScheduleSlotLock.ResourceKind.TEACHER, str(_teacher_id(teacher))))
    # stable order so two writers never wait on each other in reverse
    for kind, key in sorted(keys):
        _lock_slot(kind, key, day_of_week)


def validate_times(day_of_week, start_time, end_time):
    try:
        day_of_week, start_time, end_time = int(day_of_week), int(start_time), int(end_time)
    except (TypeError, ValueError):
        raise ValidationError('dayOfWeek, startTime and endTime must be integers')
    if not 0 <= day_of_week <= 6:
        raise ValidationError('dayOfWeek must be between 0 (Sunday) and 6 (Saturday)')
    if not 0 <= start_time < end_time <= MINUTES_PER_DAY:
        raise ValidationError(f'Times must satisfy 0 <= startTime < endTime <= {MINUTES_PER_DAY}')
    return day_of_week, start_time, end_time


def _validate_block(values: dict):
    values['day_of_week'], values['start_time'], values['end_time'] = validate_times(
        values.get('day_of_week'), values.get('start_time'), values.get('end_time'))
    if not str(values.get('room') or '').strip():
        raise ValidationError('room is required')
    teacher = values.get('teacher')
    if teacher is None or not is_teacher(teacher):
        raise ValidationError('Teacher not found or user is not a teacher')
    start, end = values.get('start_date'), values.get('end_date')
    if start and end and end < start:
        raise ValidationError('endDate must not be before startDate')


def _check_or_raise(values: dict, exclude_id=None):
    if values.get('status', ScheduleBlock.Status.ACTIVE) != ScheduleBlock.Status.ACTIVE:
        return
    _lock_slots(values['room'], values['teacher'], values['day_of_week'])
    report = find_conflicts(values['day_of_week'], values['start_time'], values['end_time'],
                            room=values['room'], teacher=values['teacher'], exclude_id=exclude_id)
    if report.has_conflicts:
        logger.info('Schedule conflict: room=%s teacher=%s day=%s %s-%s clashes with %s',
                    values['room'], _teacher_id(values['teacher']), values['day_of_week'],
                    values['start_time'], values['end_time'], [c['id'] for c in report.as_payload()])
        raise ConflictError(report.message, conflicts=report.as_payload())


@transaction.atomic
def create_block(data: dict, actor=None) -> ScheduleBlock:
    values = {k: v for k, v in data.items() if k in _BLOCK_FIELDS}
    _validate_block(values)
    _check_or_raise(values)
    block = ScheduleBlock.objects.create(created_by=actor, **values)
    logger.info('Schedule block %s created by %s', block.pk, getattr(actor, 'username', None))
    return block


@transaction.atomic
def update_block(block: ScheduleBlock, data: dict, actor=None) -> ScheduleBlock:
    block = ScheduleBlock.objects.select_for_update().get(pk=block.pk)
    values = {f: getattr(block, f) for f in _BLOCK_FIELDS}
    values.update({k: v for k, v in data.items() if k in _BLOCK_FIELDS})
    _validate_block(values)
    _check_or_raise(values, exclude_id=block.pk)
    for name, value in values.items():
        setattr(block, name, value)
    block.save()
    logger.info('Schedule block %s updated by %s', block.pk, getattr(actor, 'username', None))
    return block


@transaction.atomic
def cancel_block(block: ScheduleBlock, actor=None) -> ScheduleBlock:
    block = ScheduleBlock.objects.select_for_update().get(pk=block.pk)
    if block.status != ScheduleBlock.Status.CANCELLED:
        block.status = ScheduleBlock.Status.CANCELLED
        block.save(update_fields=['status', 'updated_at'])
        logger.info('Schedule block %s cancelled by %s', block.pk, getattr(actor, 'username', None))
    return block
