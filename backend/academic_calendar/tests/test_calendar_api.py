from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import RoleName
from academic_calendar.models import AcademicYear, Semester
from registrar.testing import at, make_semester, make_user, make_year


class CalendarApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user('adm', RoleName.ADMIN)
        self.student = make_user('stud', RoleName.STUDENT)

    def test_current_without_year_is_404(self):
        self.client.force_authenticate(self.student)
        resp = self.client.get('/api/calendar/current/')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['message'], 'No active academic year found')

    def test_current_reports_late_window(self):
        make_semester(make_year())
        self.client.force_authenticate(self.student)
        with mock.patch('django.utils.timezone.now', return_value=at(2025, 6, 20)):
            resp = self.client.get('/api/calendar/current/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['academicYear']['name'], '2025-2026')
        self.assertEqual(resp.data['currentSemester']['name'], '1st')
        window = resp.data['enrollmentWindow']
        self.assertTrue(window['open'])
        self.assertTrue(window['isLate'])
        self.assertEqual(window['penaltyFee'], 500)

    def test_enrollment_status(self):
        make_semester(make_year())
        self.client.force_authenticate(self.student)
        with mock.patch('django.utils.timezone.now', return_value=at(2025, 6, 1)):
            resp = self.client.get('/api/calendar/enrollment-status/')
        self.assertTrue(resp.data['isOpen'])
        self.assertFalse(resp.data['isLate'])
        self.assertEqual(resp.data['semester'], '1st')
        self.assertIn('lateEnrollmentPeriod', resp.data['periodDetails'])

    def test_student_cannot_create_year(self):
        self.client.force_authenticate(self.student)
        resp = self.client.post('/api/calendar/years/', {'name': 'X', 'start_date': '2025-06-01', 'end_date': '2026-05-31'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_admin_creates_year_and_duplicate_conflicts(self):
        self.client.force_authenticate(self.admin)
        payload = {'name': '2026-2027', 'start_date': '2026-06-01', 'end_date': '2027-05-31', 'is_current_year': True}
        resp = self.client.post('/api/calendar/years/', payload, format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(AcademicYear.objects.get(name='2026-2027').is_current_year)
        resp = self.client.post('/api/calendar/years/', payload, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('conflicts', resp.data)

    def test_admin_switches_current_year(self):
        old = make_year()
        self.client.force_authenticate(self.admin)
        resp = self.client.post('/api/calendar/years/', {
            'name': '2026-2027', 'start_date': '2026-06-01', 'end_date': '2027-05-31', 'is_current_year': True,
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        current = AcademicYear.objects.filter(is_current_year=True)
        self.assertEqual(list(current.values_list('name', flat=True)), ['2026-2027'])

        resp = self.client.put(f'/api/calendar/years/{old.pk}/', {'is_current_year': True}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['academicYear']['is_current_year'])
        self.assertEqual(list(current.values_list('name', flat=True)), ['2025-2026'])

    def test_add_and_update_semester(self):
        year = make_year()
        self.client.force_authenticate(self.admin)
        resp = self.client.post(f'/api/calendar/years/{year.pk}/semesters/', {
            'name': '2nd', 'start_date': '2025-11-15', 'end_date': '2026-03-31',
            'enrollment_start': '2025-10-15', 'enrollment_end': '2025-11-30',
            'holiday_breaks': [{'name': 'Christmas', 'start_date': '2025-12-20', 'end_date': '2026-01-03'}],
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        sem = Semester.objects.get(academic_year=year, name='2nd')
        self.assertEqual(sem.holiday_breaks.count(), 1)

        resp = self.client.post(f'/api/calendar/years/{year.pk}/semesters/', {
            'name': '2nd', 'start_date': '2025-11-15', 'end_date': '2026-03-31',
        }, format='json')
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put(f'/api/calendar/years/{year.pk}/semesters/2nd/', {'status': 'ongoing'}, format='json')
        self.assertEqual(resp.status_code, 200)
        sem.refresh_from_db()
        self.assertEqual(sem.status, 'ongoing')

    def test_semester_dates_validated(self):
        year = make_year()
        self.client.force_authenticate(self.admin)
        resp = self.client.post(f'/api/calendar/years/{year.pk}/semesters/', {
            'name': '2nd', 'start_date': '2026-03-31', 'end_date': '2025-11-15',
        }, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_init_default(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post('/api/calendar/init-default/', {'start_year': 2025}, format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(len(resp.data['academicYear']['semesters']), 3)
        resp = self.client.post('/api/calendar/init-default/', {}, format='json')
        self.assertEqual(resp.status_code, 400)
