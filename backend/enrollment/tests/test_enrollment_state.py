import datetime
from decimal import Decimal

from django.test import TestCase

from academic_calendar.models import Semester
from accounts.models import RoleName
from enrollment.models import Enrollment, EnrollmentAction, SubjectLine
from enrollment.services import enrollment_state
from finance.models import FeeItem, FinancialRecord
from finance.services import ledger
from registrar.exceptions import AuthorizationError, ConflictError, StateError, ValidationError
from registrar.testing import at, make_department, make_semester, make_subject, make_user, make_year

OPEN = at(2025, 6, 1)
LATE = at(2025, 6, 20)
CLOSED = at(2025, 7, 20)
ADD_DROP = at(2025, 6, 20)


class EnrollmentFixtures(TestCase):
    def setUp(self):
        self.dept = make_department()
        self.other_dept = make_department('BA', 'Business')
        self.year = make_year()
        self.semester = make_semester(self.year)
        self.prog = make_subject('CS101', self.dept)
        self.lab = make_subject('CS102', self.dept, lecture_units=2, laboratory_units=1, total_units=3)
        self.extra = make_subject('CS103', self.dept)
        self.foreign = make_subject('BA101', self.other_dept)
        self.student = make_user('stud', RoleName.STUDENT, department=self.dept, year_level=1,
                                 student_number='2025-0001')
        self.admin = make_user('adm', RoleName.ADMIN)
        self.cashier = make_user('cash', RoleName.CASHIER)

    def enroll(self, now=OPEN, subjects=None, student=None):
        lines = subjects if subjects is not None else [{'subject': self.prog.pk, 'section': 'A'},
                                                        {'subject': self.lab.pk, 'section': 'A'}]
        return enrollment_state.create_enrollment(student or self.student, self.year, self.semester, lines, now=now)


class CreateEnrollmentTests(EnrollmentFixtures):
    def test_opens_pending_enrollment_with_priced_record(self):
        enrollment, record = self.enroll()
        self.assertEqual(enrollment.enrollment_status, Enrollment.Status.PENDING)
        self.assertEqual(enrollment.department, self.dept)
        self.assertEqual(enrollment.year_level, 1)
        self.assertFalse(enrollment.is_late)
        self.assertEqual(enrollment.subject_lines.count(), 2)
        self.assertEqual(record.enrollment_reference, enrollment)
        self.assertEqual(record.total_units, 6)
        self.assertEqual(record.tuition_total, Decimal('6000'))
        labs = list(record.fee_items.filter(category=FeeItem.Category.LABORATORY))
        self.assertEqual([(f.subject_code, f.amount) for f in labs], [('CS102', Decimal('500'))])
        self.assertEqual(record.total_due, Decimal('7800'))
        self.assertEqual(record.remaining_balance, Decimal('7800'))
        self.assertEqual(list(enrollment.actions.values_list('action', flat=True)),
                         [EnrollmentAction.Action.SUBMITTED])

    def test_closed_window_rejected(self):
        with self.assertRaises(StateError) as ctx:
            self.enroll(now=CLOSED)
        self.assertEqual(ctx.exception.message, 'Enrollment is currently closed')
        self.assertFalse(Enrollment.objects.exists())

    def test_late_enrollment_records_penalty_without_billing_it(self):
        enrollment, record = self.enroll(now=LATE)
        self.assertTrue(enrollment.is_late)
        self.assertEqual(enrollment.late_penalty_fee, Decimal('500'))
        self.assertFalse(record.fee_items.filter(category=FeeItem.Category.OTHER).exists())
        self.assertEqual(record.total_due, Decimal('7800'))

    def test_window_of_a_later_semester_does_not_open_enrollment(self):
        d = datetime.date
        second = make_semester(
            self.year, name='2nd', order=2,
            start_date=d(2025, 11, 1), end_date=d(2026, 3, 31),
            enrollment_start=d(2025, 10, 15), enrollment_end=d(2025, 11, 30),
            late_enrollment_start=d(2025, 12, 1), late_enrollment_end=d(2025, 12, 15),
            add_drop_start=d(2025, 12, 1), add_drop_end=d(2025, 12, 20),
            status=Semester.Status.PENDING,
        )
        with self.assertRaises(StateError) as ctx:
            enrollment_state.create_enrollment(self.student, self.year, second, [{'subject': self.prog.pk}],
                                               now=at(2025, 10, 20))
        self.assertEqual(ctx.exception.message, 'Enrollment is currently closed')
        self.assertFalse(Enrollment.objects.exists())

    def test_only_the_current_semester_accepts_enrollment(self):
        next_year = make_year('2026-2027', start_year=2026, current=False)
        # its own window is open on the same day as the current one
        other = make_semester(next_year)
        with self.assertRaises(StateError) as ctx:
            enrollment_state.create_enrollment(self.student, next_year, other, [{'subject': self.prog.pk}], now=OPEN)
        self.assertEqual(ctx.exception.message, 'Enrollment is only accepted for the current semester')
        self.assertFalse(Enrollment.objects.exists())

    def test_duplicate_term_is_conflict(self):
        self.enroll()
        with self.assertRaises(ConflictError) as ctx:
            self.enroll()
        self.assertEqual(ctx.exception.message, 'Already enrolled for this semester')
        self.assertEqual(Enrollment.objects.count(), 1)
        self.assertEqual(FinancialRecord.objects.count(), 1)

    def test_subject_outside_department_is_invalid(self):
        with self.assertRaises(ValidationError) as ctx:
            self.enroll(subjects=[{'subject': self.prog.pk}, {'subject': self.foreign.pk}])
        self.assertEqual(ctx.exception.message, 'One or more subjects are invalid')
        self.assertFalse(Enrollment.objects.exists())

    def test_unknown_subject_is_invalid(self):
        with self.assertRaises(ValidationError):
            self.enroll(subjects=[{'subject': 99999}])

    def test_only_students_enroll(self):
        teacher = make_user('t1', RoleName.TEACHER, department=self.dept)
        with self.assertRaises(AuthorizationError):
            self.enroll(student=teacher)


class ApprovalTests(EnrollmentFixtures):
    def test_approve_sets_approver(self):
        enrollment, _ = self.enroll()
        enrollment = enrollment_state.approve_enrollment(enrollment, self.admin)
        self.assertEqual(enrollment.enrollment_status, Enrollment.Status.APPROVED)
        self.assertEqual(enrollment.approved_by, self.admin)
        self.assertIsNotNone(enrollment.date_approved)

    def test_approve_twice_is_noop(self):
        enrollment, _ = self.enroll()
        enrollment_state.approve_enrollment(enrollment, self.admin)
        enrollment_state.approve_enrollment(enrollment, self.cashier)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.approved_by, self.admin)
        self.assertEqual(enrollment.actions.filter(action=EnrollmentAction.Action.APPROVED).count(), 1)

    def test_reject_requires_reason(self):
        enrollment, _ = self.enroll()
        with self.assertRaises(ValidationError):
            enrollment_state.reject_enrollment(enrollment, self.admin, '  ')

    def test_rejected_cannot_be_approved(self):
        enrollment, _ = self.enroll()
        enrollment_state.reject_enrollment(enrollment, self.admin, 'Missing documents')
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.rejection_reason, 'Missing documents')
        self.assertEqual(enrollment.rejected_by, self.admin)
        with self.assertRaises(StateError):
            enrollment_state.approve_enrollment(enrollment, self.admin)

    def test_change_status_requires_admin(self):
        enrollment, _ = self.enroll()
        with self.assertRaises(AuthorizationError):
            enrollment_state.change_status(enrollment, self.student, Enrollment.Status.APPROVED)
        with self.assertRaises(StateError):
            enrollment_state.change_status(enrollment, self.admin, Enrollment.Status.PENDING)


class AddDropTests(EnrollmentFixtures):
    def setUp(self):
        super().setUp()
        self.enrollment, self.record = self.enroll()

    def approve(self):
        enrollment_state.approve_enrollment(self.enrollment, self.admin)

    def test_drop_reprices_and_keeps_payments(self):
        self.approve()
        ledger.add_payment(self.record, '3000', 'cash', received_by=self.cashier)
        enrollment, record = enrollment_state.add_drop(self.enrollment, self.student, [], [self.lab.pk], now=ADD_DROP)

        line = enrollment.subject_lines.get(subject=self.lab)
        self.assertEqual(line.status, SubjectLine.Status.DROPPED)
        self.assertEqual(line.remarks, enrollment_state.DROPPED_REMARK)
        self.assertIsNotNone(line.dropped_at)
        self.assertEqual(record.total_units, 3)
        self.assertFalse(record.fee_items.filter(category=FeeItem.Category.LABORATORY).exists())
        self.assertEqual(record.total_due, Decimal('4300'))
        self.assertEqual(record.payments.count(), 1)
        self.assertEqual(record.remaining_balance, Decimal('1300'))

    def test_add_appends_line(self):
        self.approve()
        enrollment, record = enrollment_state.add_drop(
            self.enrollment, self.student, [{'subject': self.extra.pk, 'section': 'B'}], [], now=ADD_DROP)
        line = enrollment.subject_lines.get(subject=self.extra)
        self.assertEqual(line.status, SubjectLine.Status.ENROLLED)
        self.assertEqual(line.remarks, enrollment_state.ADDED_REMARK)
        self.assertEqual(record.total_units, 9)
        self.assertTrue(enrollment.actions.filter(action=EnrollmentAction.Action.SUBJECT_ADDED).exists())

    def test_add_already_enrolled_subject_is_conflict(self):
        self.approve()
        with self.assertRaises(ConflictError):
            enrollment_state.add_drop(self.enrollment, self.student, [{'subject': self.prog.pk}], [], now=ADD_DROP)

    def test_dropped_subject_can_be_added_back(self):
        self.approve()
        enrollment_state.add_drop(self.enrollment, self.student, [], [self.prog.pk], now=ADD_DROP)
        enrollment, record = enrollment_state.add_drop(
            self.enrollment, self.student, [{'subject': self.prog.pk}], [], now=ADD_DROP)
        statuses = sorted(enrollment.subject_lines.filter(subject=self.prog).values_list('status', flat=True))
        self.assertEqual(statuses, [SubjectLine.Status.DROPPED, SubjectLine.Status.ENROLLED])
        self.assertEqual(record.total_units, 6)

    def test_pending_enrollment_locked_for_student(self):
        with self.assertRaises(StateError) as ctx:
            enrollment_state.add_drop(self.enrollment, self.student, [], [self.lab.pk], now=ADD_DROP)
        self.assertEqual(ctx.exception.message, 'Cannot modify subjects. Enrollment must be approved first')

    def test_outside_window_student_blocked_admin_allowed(self):
        self.approve()
        with self.assertRaises(StateError) as ctx:
            enrollment_state.add_drop(self.enrollment, self.student, [], [self.lab.pk], now=CLOSED)
        self.assertEqual(ctx.exception.message, 'Add/Drop period is not currently active')
        _, record = enrollment_state.add_drop(self.enrollment, self.admin, [], [self.lab.pk], now=CLOSED)
        self.assertEqual(record.total_units, 3)

    def test_other_student_not_authorized(self):
        self.approve()
        other = make_user('stud2', RoleName.STUDENT, department=self.dept)
        with self.assertRaises(AuthorizationError):
            enrollment_state.add_drop(self.enrollment, other, [], [self.lab.pk], now=ADD_DROP)

    def test_drop_of_subject_not_enrolled_is_invalid(self):
        self.approve()
        with self.assertRaises(ValidationError):
            enrollment_state.add_drop(self.enrollment, self.student, [], [self.extra.pk], now=ADD_DROP)
        self.record.refresh_from_db()
        self.assertEqual(self.record.total_units, 6)
