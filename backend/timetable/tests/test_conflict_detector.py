import itertools

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import RoleName
from registrar.exceptions import ConflictError, ValidationError
from registrar.testing import make_department, make_subject, make_user, make_year
from timetable.models import ScheduleBlock, ScheduleSlotLock
from timetable.services import conflict_detector
from timetable.services.conflict_detector import intervals_overlap

MONDAY = 1


class OverlapPredicateTests(TestCase):
    def test_symmetric(self):
        points = [0, 30, 60, 90, 120]
        for s1, e1, s2, e2 in itertools.product(points, repeat=4):
            if s1 >= e1 or s2 >= e2:
                continue
            self.assertEqual(intervals_overlap(s1, e1, s2, e2), intervals_overlap(s2, e2, s1, e1))

    def test_touching_boundary_is_not_overlap(self):
        self.assertFalse(intervals_overlap(540, 600, 600, 660))
        self.assertFalse(intervals_overlap(600, 660, 540, 600))

    def test_containment_and_partial(self):
        self.assertTrue(intervals_overlap(540, 720, 600, 630))
        self.assertTrue(intervals_overlap(600, 630, 540, 720))
        self.assertTrue(intervals_overlap(540, 630, 600, 660))


class ConflictDetectorTests(TestCase):
    def setUp(self):
        self.dept = make_department()
        self.year = make_year()
        self.course = make_subject('CS101', self.dept)
        self.other_course = make_subject('CS102', self.dept)
        self.teacher = make_user('t1', RoleName.TEACHER)
        self.teacher2 = make_user('t2', RoleName.TEACHER)
        self.admin = make_user('adm', RoleName.ADMIN)

    def block(self, start, end, room='Room305', teacher=None, day=MONDAY, **extra):
        data = dict(course=self.course, teacher=teacher or self.teacher, academic_year=self.year,
                    room=room, day_of_week=day, start_time=start, end_time=end)
        data.update(extra)
        return conflict_detector.create_block(data, actor=self.admin)

    def test_room_overlap_scenario(self):
        self.block(540, 630)
        with self.assertRaises(ConflictError) as ctx:
            self.block(600, 660, teacher=self.teacher2)
        self.assertEqual(ctx.exception.message, 'Room scheduling conflict detected')
        self.assertEqual(len(ctx.exception.conflicts), 1)
        self.assertEqual(ctx.exception.conflicts[0]['resources'], ['room'])

    def test_same_teacher_same_room_reports_block_once(self):
        self.block(540, 630)
        with self.assertRaises(ConflictError) as ctx:
            self.block(600, 660)
        self.assertEqual(len(ctx.exception.conflicts), 1)
        self.assertEqual(ctx.exception.conflicts[0]['resources'], ['room', 'teacher'])

    def test_teacher_conflict_in_other_room(self):
        self.block(540, 630)
        with self.assertRaises(ConflictError) as ctx:
            self.block(600, 660, room='Room101')
        self.assertEqual(ctx.exception.message, 'Teacher scheduling conflict detected')

    def test_touching_blocks_allowed(self):
        self.block(540, 600)
        self.block(600, 660, teacher=self.teacher2)
        self.assertEqual(ScheduleBlock.objects.count(), 2)

    def test_other_day_allowed(self):
        self.block(540, 630)
        self.block(540, 630, day=2)

    def test_cancelled_and_non_recurring_ignored(self):
        first = self.block(540, 630)
        conflict_detector.cancel_block(first, actor=self.admin)
        self.block(540, 630, is_recurring=False)
        report = conflict_detector.find_conflicts(MONDAY, 540, 630, room='Room305', teacher=self.teacher)
        self.assertFalse(report.has_conflicts)

    def test_room_match_ignores_case(self):
        self.block(540, 630)
        report = conflict_detector.find_conflicts(MONDAY, 600, 700, room=' room305 ')
        self.assertEqual(len(report.room_conflicts), 1)

    def test_update_excludes_itself(self):
        b = self.block(540, 630)
        updated = conflict_detector.update_block(b, {'end_time': 660}, actor=self.admin)
        self.assertEqual(updated.end_time, 660)

    def test_update_into_conflict_rejected(self):
        self.block(540, 630)
        b = self.block(630, 700, teacher=self.teacher2)
        with self.assertRaises(ConflictError):
            conflict_detector.update_block(b, {'start_time': 600}, actor=self.admin)
        b.refresh_from_db()
        self.assertEqual(b.start_time, 630)

    def test_except_dates_not_consulted(self):
        self.block(540, 630, except_dates=['2025-07-07'])
        report = conflict_detector.find_conflicts(MONDAY, 540, 630, room='Room305')
        self.assertTrue(report.has_conflicts)

    def test_invalid_times(self):
        for start, end in ((600, 600), (700, 600), (-1, 30), (0, 1441), (1440, 1441)):
            with self.assertRaises(ValidationError):
                self.block(start, end)
        with self.assertRaises(ValidationError):
            self.block(540, 600, day=7)

    def test_block_may_end_at_midnight(self):
        late = self.block(1320, 1440)
        self.assertEqual(late.end_time, 1440)
        self.assertEqual(late.formatted_end_time, '12:00 AM')
        self.assertTrue(conflict_detector.find_conflicts(MONDAY, 1400, 1440, room='Room305').has_conflicts)

    def test_teacher_role_required(self):
        student = make_user('s1', RoleName.STUDENT)
        with self.assertRaises(ValidationError):
            self.block(540, 600, teacher=student)

    def test_slot_locks_written(self):
        self.block(540, 600)
        kinds = set(ScheduleSlotLock.objects.values_list('resource_kind', 'resource_key', 'day_of_week'))
        self.assertIn(('room', 'room305', MONDAY), kinds)
        self.assertIn(('teacher', str(self.teacher.pk), MONDAY), kinds)


class ScheduleApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.dept = make_department()
        self.year = make_year()
        self.course = make_subject('CS101', self.dept)
        self.teacher = make_user('t1', RoleName.TEACHER)
        self.teacher2 = make_user('t2', RoleName.TEACHER)
        self.admin = make_user('adm', RoleName.ADMIN)
        self.client.force_authenticate(self.admin)

    def payload(self, start, end, teacher=None, room='Room305'):
        return {
            'course': self.course.pk, 'teacher': (teacher or self.teacher).pk, 'academicYear': self.year.pk,
            'room': room, 'dayOfWeek': MONDAY, 'startTime': start, 'endTime': end, 'isRecurring': True,
        }

    def test_create_then_conflict(self):
        resp = self.client.post('/api/schedules/', self.payload(540, 630), format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['formatted_start_time'], '9:00 AM')
        self.assertEqual(resp.data['day_name'], 'Monday')

        resp = self.client.post('/api/schedules/', self.payload(600, 660, teacher=self.teacher2), format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['message'], 'Room scheduling conflict detected')
        self.assertEqual(len(resp.data['conflicts']), 1)

    def test_non_admin_cannot_create(self):
        self.client.force_authenticate(self.teacher)
        resp = self.client.post('/api/schedules/', self.payload(540, 630), format='json')
        self.assertEqual(resp.status_code, 403)

    def test_conflict_check_endpoint(self):
        self.client.post('/api/schedules/', self.payload(540, 630), format='json')
        resp = self.client.get('/api/schedules/conflicts/check/', {
            'room': 'Room305', 'teacher': self.teacher2.pk, 'dayOfWeek': MONDAY, 'startTime': 600, 'endTime': 700,
        })
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['hasConflicts'])
        self.assertEqual(len(resp.data['roomConflicts']), 1)
        self.assertEqual(resp.data['teacherConflicts'], [])

    def test_cancel_and_delete_are_soft(self):
        created = self.client.post('/api/schedules/', self.payload(540, 630), format='json').data
        resp = self.client.post(f"/api/schedules/{created['id']}/cancel/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['schedule']['status'], 'cancelled')
        resp = self.client.delete(f"/api/schedules/{created['id']}/")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(ScheduleBlock.objects.filter(pk=created['id']).exists())

    def test_room_schedule_by_date(self):
        self.client.post('/api/schedules/', self.payload(540, 630), format='json')
        # 2025-07-07 is a Monday
        resp = self.client.get('/api/schedules/room/Room305/', {'date': '2025-07-07'})
        self.assertEqual(len(resp.data), 1)
        resp = self.client.get('/api/schedules/room/Room305/', {'date': '2025-07-08'})
        self.assertEqual(len(resp.data), 0)

    def test_teacher_schedule_visibility(self):
        self.client.post('/api/schedules/', self.payload(540, 630), format='json')
        self.client.force_authenticate(self.teacher)
        self.assertEqual(len(self.client.get(f'/api/schedules/teacher/{self.teacher.pk}/').data), 1)
        resp = self.client.get(f'/api/schedules/teacher/{self.teacher2.pk}/')
        self.assertEqual(resp.status_code, 403)
