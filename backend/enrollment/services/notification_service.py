import logging
from typing import List

from accounts.models import RoleName
from enrollment.models import Enrollment

logger = logging.getLogger(__name__)


def _admin_user_ids() -> List[int]:
    from django.contrib.auth import get_user_model

    User = get_user_model()
    return list(User.objects.filter(roles__name=RoleName.ADMIN, is_active=True).values_list('id', flat=True))


def _log(event: str, enrollment: Enrollment, target_user_ids: List[int], reason: str, **extra):
    payload = {
        'event': event,
        'enrollment_id': enrollment.id,
        'student_id': enrollment.student_id,
        'semester_id': enrollment.semester_id,
        'status': enrollment.enrollment_status,
        'target_user_ids': target_user_ids,
        'reason': reason,
    }
    payload.update(extra)
    logger.info('%s', payload)


def notify_enrollment_submitted(enrollment: Enrollment):
    """Registrar admins pick up new submissions."""
    reason = 'Late enrollment submitted' if enrollment.is_late else 'Enrollment submitted by student'
    _log('enrollment_submitted', enrollment, _admin_user_ids(), reason)


def notify_enrollment_approved(enrollment: Enrollment, automatic: bool = False):
    reason = 'Approved after full payment' if automatic else 'Approved by registrar'
    _log('enrollment_approved', enrollment, [enrollment.student_id], reason)


def notify_enrollment_rejected(enrollment: Enrollment):
    _log('enrollment_rejected', enrollment, [enrollment.student_id], enrollment.rejection_reason)


def notify_subjects_changed(enrollment: Enrollment, added: List[str], dropped: List[str]):
    _log('enrollment_subjects_changed', enrollment, [enrollment.student_id], 'Add/drop applied',
         added=added, dropped=dropped)
