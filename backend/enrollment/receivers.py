import logging

from django.dispatch import receiver

from finance.signals import balance_settled

from .models import Enrollment
from .services import enrollment_state

logger = logging.getLogger(__name__)


@receiver(balance_settled, dispatch_uid='enrollment_approve_on_settlement')
def approve_on_settlement(sender, record, enrollment_id=None, recorded_by=None, **kwargs):
    """Full payment approves a still-pending enrollment, attributed to the payment recorder."""
    if enrollment_id is None:
        return
    enrollment = Enrollment.objects.select_for_update().filter(pk=enrollment_id).first()
    if enrollment is None:
        logger.warning('Settled record %s points at missing enrollment %s', record.pk, enrollment_id)
        return
    if enrollment.enrollment_status != Enrollment.Status.PENDING:
        return
    enrollment_state.approve_enrollment(enrollment, actor=recorded_by, automatic=True)
