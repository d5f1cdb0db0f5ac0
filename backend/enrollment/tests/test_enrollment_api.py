from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import RoleName
from enrollment.models import Enrollment
from enrollment.services import enrollment_state
from registrar.testing import at, make_department, make_semester, make_subject, make_user, make_year


def frozen(*args):
    return mock.patch('django.utils.timezone.now', return_value=at(*args))


class EnrollmentApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.dept = make_department()
        self.year = make_year()
        self.semester = make_semester(self.year)
        self.prog = make_subject('CS101', self.dept, year_level=1, semester_name='1st')
        self.lab = make_subject('CS102', self.dept, lecture_units=2, laboratory_units=1, total_units=3,
                                year_level=1, semester_name='1st')
        self.student = make_user('stud', RoleName.STUDENT, department=self.dept, year_level=1)
        self.other = make_user('stud2', RoleName.STUDENT, department=self.dept, year_level=1)
        self.admin = make_user('adm', RoleName.ADMIN)

    def payload(self):
        return {
            'academicYear': self.year.pk,
            'semester': '1st',
            'subjects': [{'subject': self.prog.pk, 'section': 'A'}, {'subject': self.lab.pk}],
        }

    def submit(self):
        self.client.force_authenticate(self.student)
        with frozen(2025, 6, 1):
            return self.client.post('/api/enrollments/', self.payload(), format='json')

    def test_submit_returns_enrollment_and_record(self):
        resp = self.submit()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['enrollment']['enrollment_status'], 'pending')
        self.assertEqual(len(resp.data['enrollment']['subjects']), 2)
        record = resp.data['financialRecord']
        self.assertEqual(record['total_due'], '7800.00')
        self.assertEqual(record['tuition_fee']['totalUnits'], 6)
        self.assertEqual(len(record['laboratory_fees']), 1)

    def test_submit_defaults_to_current_term(self):
        self.client.force_authenticate(self.student)
        with frozen(2025, 6, 1):
            resp = self.client.post('/api/enrollments/', {'subjects': [self.prog.pk]}, format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['enrollment']['semester'], self.semester.pk)

    def test_submit_when_closed(self):
        self.client.force_authenticate(self.student)
        with frozen(2025, 8, 1):
            resp = self.client.post('/api/enrollments/', self.payload(), format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['message'], 'Enrollment is currently closed')

    def test_duplicate_submit_carries_conflicts(self):
        self.submit()
        resp = self.submit()
        self.assertEqual(resp.status_code, 400)
        self.assertIn('conflicts', resp.data)

    def test_admin_cannot_submit(self):
        self.client.force_authenticate(self.admin)
        with frozen(2025, 6, 1):
            resp = self.client.post('/api/enrollments/', self.payload(), format='json')
        self.assertEqual(resp.status_code, 403)

    def test_list_is_role_filtered(self):
        self.submit()
        self.client.force_authenticate(self.other)
        resp = self.client.get('/api/enrollments/')
        self.assertEqual(resp.data['count'], 0)
        self.client.force_authenticate(self.admin)
        resp = self.client.get('/api/enrollments/', {'status': 'pending'})
        self.assertEqual(resp.data['count'], 1)

    def test_detail_hidden_from_other_students(self):
        pk = self.submit().data['enrollment']['id']
        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.get(f'/api/enrollments/{pk}/').status_code, 403)
        self.client.force_authenticate(self.student)
        resp = self.client.get(f'/api/enrollments/{pk}/')
        self.assertEqual(resp.status_code, 200)
        self.assertIsNotNone(resp.data['financialRecord'])

    def test_status_patch(self):
        pk = self.submit().data['enrollment']['id']
        self.client.force_authenticate(self.student)
        resp = self.client.patch(f'/api/enrollments/{pk}/status/', {'status': 'approved'}, format='json')
        self.assertEqual(resp.status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.patch(f'/api/enrollments/{pk}/status/', {'status': 'rejected'}, format='json')
        self.assertEqual(resp.status_code, 400)
        resp = self.client.patch(f'/api/enrollments/{pk}/status/',
                                 {'status': 'rejected', 'rejectionReason': 'Incomplete requirements'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['enrollment_status'], 'rejected')
        self.assertEqual(resp.data['rejection_reason'], 'Incomplete requirements')

    def test_subjects_patch_during_add_drop(self):
        pk = self.submit().data['enrollment']['id']
        enrollment_state.approve_enrollment(Enrollment.objects.get(pk=pk), self.admin)
        self.client.force_authenticate(self.student)
        with frozen(2025, 6, 20):
            resp = self.client.patch(f'/api/enrollments/{pk}/subjects/', {'dropSubjects': [self.lab.pk]},
                                     format='json')
        self.assertEqual(resp.status_code, 200)
        statuses = {s['subject_code']: s['status'] for s in resp.data['subjects']}
        self.assertEqual(statuses, {'CS101': 'enrolled', 'CS102': 'dropped'})

        resp = self.client.get(f'/api/enrollments/{pk}/')
        self.assertEqual(resp.data['financialRecord']['tuition_fee']['totalUnits'], 3)
        self.assertEqual(resp.data['financialRecord']['total_due'], '4300.00')

    def test_subjects_patch_on_pending_is_state_error(self):
        pk = self.submit().data['enrollment']['id']
        self.client.force_authenticate(self.student)
        with frozen(2025, 6, 20):
            resp = self.client.patch(f'/api/enrollments/{pk}/subjects/', {'dropSubjects': [self.lab.pk]},
                                     format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['message'], 'Cannot modify subjects. Enrollment must be approved first')

    def test_history(self):
        pk = self.submit().data['enrollment']['id']
        resp = self.client.get(f'/api/enrollments/{pk}/history/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([a['action'] for a in resp.data], ['SUBMITTED'])

    def test_available_subjects(self):
        self.client.force_authenticate(self.student)
        with frozen(2025, 6, 1):
            resp = self.client.get('/api/enrollments/available-subjects/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(sorted(s['code'] for s in resp.data), ['CS101', 'CS102'])

    def test_stats_summary(self):
        self.submit()
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get('/api/enrollments/stats/summary/').status_code, 403)
        self.client.force_authenticate(self.admin)
        resp = self.client.get('/api/enrollments/stats/summary/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['total'], 1)
        self.assertEqual(resp.data['byStatus']['pending'], 1)
        self.assertEqual(resp.data['byDepartment'], [{'department': 'CS', 'count': 1}])
