"""Enrollment lifecycle: submission, approval, rejection and add/drop.

States move pending -> approved | rejected. Subject lines are never deleted;
a drop flips the line to `dropped`. Every mutation that touches the linked
financial record runs in the same transaction as the enrollment change.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from academic_calendar.services import calendar_authority
from accounts.utils import is_admin, is_student
from catalog.services import catalog
from enrollment.models import Enrollment, EnrollmentAction, SubjectLine
from enrollment.services import notification_service
from finance.models import FinancialRecord
from finance.services import ledger
from registrar.exceptions import (
    AuthorizationError,
    ConflictError,
    StateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ADDED_REMARK = 'Added during add/drop period'
DROPPED_REMARK = 'Dropped during add/drop period'


def _parse_lines(raw) -> List[Tuple[object, str]]:
    """Normalize `[{subject, section}]` or bare ids into (subject_id, section) pairs."""
    out = []
    for item in raw or []:
        if isinstance(item, dict):
            sid = item.get('subject', item.get('subject_id', item.get('subjectId', item.get('id'))))
            out.append((sid, str(item.get('section') or '')))
        else:
            out.append((item, ''))
    return out


def _load_subjects(pairs, department):
    ids = [sid for sid, _ in pairs]
    found = catalog.find_department_subjects(ids, department)
    if not ids or any(_as_int(sid) not in found for sid in ids):
        raise ValidationError('One or more subjects are invalid')
    return found


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _record_for(enrollment: Enrollment) -> Optional[FinancialRecord]:
    return FinancialRecord.objects.filter(enrollment_reference=enrollment).first()


def _enrolled_subjects(enrollment: Enrollment):
    return [line.subject for line in enrollment.enrolled_lines().select_related('subject').order_by('order', 'id')]


@transaction.atomic
def create_enrollment(student, academic_year, semester, subject_lines, now=None):
    """Submit an enrollment and open its financial record.

    Returns (enrollment, financial_record).
    """
    if not is_student(student):
        raise AuthorizationError('Only students can submit enrollments')
    if student.department_id is None:
        raise ValidationError('Student has no department assigned')
    if semester.academic_year_id != academic_year.pk:
        raise ValidationError('Semester does not belong to the academic year')

    # the window is always that of the current year's ongoing semester
    window = calendar_authority.enrollment_window(now)
    if not window.open:
        raise StateError('Enrollment is currently closed')
    current = calendar_authority.current_semester(now)
    if current is None or current.pk != semester.pk:
        raise StateError('Enrollment is only accepted for the current semester')

    if Enrollment.objects.filter(student=student, academic_year=academic_year, semester=semester).exists():
        raise ConflictError('Already enrolled for this semester',
                            conflicts=[{'academicYear': academic_year.name, 'semester': semester.name}])

    pairs = _parse_lines(subject_lines)
    if not pairs:
        raise ValidationError('At least one subject is required')
    ids = [_as_int(sid) for sid, _ in pairs]
    if len(set(ids)) != len(ids):
        raise ValidationError('Duplicate subjects in request')
    subjects = _load_subjects(pairs, student.department)

    stamp = now if now is not None else timezone.now()
    try:
        with transaction.atomic():
            enrollment = Enrollment.objects.create(
                student=student,
                academic_year=academic_year,
                semester=semester,
                year_level=student.year_level,
                department=student.department,
                date_submitted=stamp,
                is_late=window.is_late,
                late_penalty_fee=window.penalty_fee if window.is_late else 0,
            )
    except IntegrityError:
        raise ConflictError('Already enrolled for this semester',
                            conflicts=[{'academicYear': academic_year.name, 'semester': semester.name}])

    SubjectLine.objects.bulk_create([
        SubjectLine(enrollment=enrollment, subject=subjects[sid], section=section, order=i, added_at=stamp)
        for i, (sid, section) in enumerate((_as_int(s), sec) for s, sec in pairs)
    ])
    EnrollmentAction.objects.create(
        enrollment=enrollment,
        acted_by=student,
        action=EnrollmentAction.Action.SUBMITTED,
        remarks='Late enrollment' if window.is_late else '',
    )

    # the late penalty stays on the enrollment and is not billed
    record = ledger.open_record(enrollment, [subjects[_as_int(sid)] for sid, _ in pairs], created_by=student)
    logger.info('Enrollment %s submitted by %s for %s %s (late=%s)',
                enrollment.pk, student.username, academic_year.name, semester.name, window.is_late)
    notification_service.notify_enrollment_submitted(enrollment)
    return enrollment, record


def _locked(enrollment: Enrollment) -> Enrollment:
    return Enrollment.objects.select_for_update().get(pk=enrollment.pk)


@transaction.atomic
def approve_enrollment(enrollment: Enrollment, actor, remarks: str = '', automatic: bool = False) -> Enrollment:
    enrollment = _locked(enrollment)
    if enrollment.enrollment_status == Enrollment.Status.APPROVED:
        return enrollment
    if enrollment.enrollment_status == Enrollment.Status.REJECTED:
        raise StateError('Rejected enrollments cannot be approved')

    enrollment.enrollment_status = Enrollment.Status.APPROVED
    enrollment.date_approved = timezone.now()
    enrollment.approved_by = actor
    enrollment.save(update_fields=['enrollment_status', 'date_approved', 'approved_by', 'updated_at'])
    EnrollmentAction.objects.create(
        enrollment=enrollment,
        acted_by=actor,
        action=EnrollmentAction.Action.APPROVED,
        remarks=remarks or ('Balance settled' if automatic else ''),
    )
    logger.info('Enrollment %s approved by %s%s', enrollment.pk, getattr(actor, 'username', None),
                ' (payment settled)' if automatic else '')
    notification_service.notify_enrollment_approved(enrollment, automatic=automatic)
    return enrollment


@transaction.atomic
def reject_enrollment(enrollment: Enrollment, actor, reason: str) -> Enrollment:
    reason = (reason or '').strip()
    if not reason:
        raise ValidationError('Rejection reason is required')
    enrollment = _locked(enrollment)
    if enrollment.enrollment_status == Enrollment.Status.REJECTED:
        return enrollment

    enrollment.enrollment_status = Enrollment.Status.REJECTED
    enrollment.date_rejected = timezone.now()
    enrollment.rejected_by = actor
    enrollment.rejection_reason = reason
    enrollment.save(update_fields=['enrollment_status', 'date_rejected', 'rejected_by', 'rejection_reason',
                                   'updated_at'])
    EnrollmentAction.objects.create(
        enrollment=enrollment,
        acted_by=actor,
        action=EnrollmentAction.Action.REJECTED,
        remarks=reason,
    )
    logger.info('Enrollment %s rejected by %s', enrollment.pk, getattr(actor, 'username', None))
    notification_service.notify_enrollment_rejected(enrollment)
    return enrollment


@transaction.atomic
def change_status(enrollment: Enrollment, actor, status: str, reason: Optional[str] = None,
                  notes: Optional[str] = None) -> Enrollment:
    if not is_admin(actor):
        raise AuthorizationError('Only administrators can change enrollment status')
    if status not in Enrollment.Status.values:
        raise ValidationError('Invalid status')
    if status == Enrollment.Status.PENDING:
        raise StateError('Enrollments cannot be returned to pending')

    if notes is not None:
        Enrollment.objects.filter(pk=enrollment.pk).update(notes=notes)
    if status == Enrollment.Status.APPROVED:
        return approve_enrollment(enrollment, actor)
    return reject_enrollment(enrollment, actor, reason)


@transaction.atomic
def add_drop(enrollment: Enrollment, actor, add_lines: Iterable = (), drop_subject_ids: Iterable = (), now=None):
    """Apply an add/drop request and re-price the linked record.

    Returns (enrollment, financial_record or None).
    """
    enrollment = _locked(enrollment)
    admin = is_admin(actor)
    if enrollment.student_id != getattr(actor, 'pk', None) and not admin:
        raise AuthorizationError('Not authorized to modify this enrollment')
    if not admin:
        if enrollment.enrollment_status != Enrollment.Status.APPROVED:
            raise StateError('Cannot modify subjects. Enrollment must be approved first')
        if not calendar_authority.add_drop_window(enrollment.semester, now):
            raise StateError('Add/Drop period is not currently active')

    add_pairs = _parse_lines(add_lines)
    drop_ids = [_as_int(sid) for sid in drop_subject_ids or []]
    if not add_pairs and not drop_ids:
        raise ValidationError('No subject changes requested')

    stamp = now if now is not None else timezone.now()
    lines = {line.subject_id: line
             for line in enrollment.subject_lines.select_for_update().filter(status=SubjectLine.Status.ENROLLED)}

    dropped = []
    for sid in drop_ids:
        line = lines.pop(sid, None)
        if line is None:
            raise ValidationError('Subject is not currently enrolled')
        line.status = SubjectLine.Status.DROPPED
        line.remarks = DROPPED_REMARK
        line.dropped_at = stamp
        line.save(update_fields=['status', 'remarks', 'dropped_at'])
        dropped.append(line.subject.code)
        EnrollmentAction.objects.create(enrollment=enrollment, acted_by=actor,
                                        action=EnrollmentAction.Action.SUBJECT_DROPPED, remarks=line.subject.code)

    added = []
    if add_pairs:
        subjects = _load_subjects(add_pairs, enrollment.department or enrollment.student.department)
        already = [_as_int(sid) for sid, _ in add_pairs if _as_int(sid) in lines]
        if already or len({_as_int(sid) for sid, _ in add_pairs}) != len(add_pairs):
            raise ConflictError('Subject is already enrolled',
                                conflicts=[{'subject': sid} for sid in sorted(set(already))])
        next_order = enrollment.subject_lines.count()
        for i, (sid, section) in enumerate(add_pairs):
            subject = subjects[_as_int(sid)]
            SubjectLine.objects.create(enrollment=enrollment, subject=subject, section=section,
                                       remarks=ADDED_REMARK, order=next_order + i, added_at=stamp)
            added.append(subject.code)
            EnrollmentAction.objects.create(enrollment=enrollment, acted_by=actor,
                                            action=EnrollmentAction.Action.SUBJECT_ADDED, remarks=subject.code)

    record = _record_for(enrollment)
    if record is None:
        logger.warning('Enrollment %s has no financial record; add/drop not priced', enrollment.pk)
    else:
        record = ledger.recalc_on_add_drop(record, _enrolled_subjects(enrollment), actor=actor)

    enrollment.save(update_fields=['updated_at'])
    logger.info('Add/drop on enrollment %s by %s: added=%s dropped=%s', enrollment.pk,
                getattr(actor, 'username', None), added, dropped)
    notification_service.notify_subjects_changed(enrollment, added, dropped)
    return enrollment, record
