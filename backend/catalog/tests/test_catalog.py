from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import RoleName
from catalog.models import Subject
from catalog.services.catalog import all_belong_to_department, find_department_subjects, subjects_in_order
from registrar.testing import make_department, make_subject, make_user


class SubjectUnitsTests(TestCase):
    def setUp(self):
        self.dept = make_department()

    def test_total_units_defaults_to_lecture_plus_lab(self):
        s = make_subject('CS101', self.dept, lecture_units=2, laboratory_units=1)
        self.assertEqual(s.total_units, 3)
        self.assertEqual(s.billable_units, 3)

    def test_explicit_total_units_kept(self):
        s = make_subject('CS102', self.dept, lecture_units=2, laboratory_units=1, total_units=4)
        self.assertEqual(s.total_units, 4)

    def test_zero_units_bill_as_three(self):
        s = make_subject('PE1', self.dept, lecture_units=0, laboratory_units=0)
        self.assertEqual(s.total_units, 0)
        self.assertEqual(s.billable_units, 3)


class DepartmentMembershipTests(TestCase):
    def setUp(self):
        self.cs = make_department('CS', 'Computer Science')
        self.it = make_department('IT', 'Information Technology')
        self.a = make_subject('CS101', self.cs)
        self.b = make_subject('CS102', self.cs)
        self.other = make_subject('IT101', self.it)

    def test_find_department_subjects_filters_foreign(self):
        found = find_department_subjects([self.a.pk, self.other.pk], self.cs)
        self.assertEqual(set(found), {self.a.pk})

    def test_all_belong(self):
        self.assertTrue(all_belong_to_department([self.a.pk, str(self.b.pk)], self.cs))
        self.assertFalse(all_belong_to_department([self.a.pk, self.other.pk], self.cs))
        self.assertFalse(all_belong_to_department([self.a.pk, 'junk'], self.cs))
        self.assertFalse(all_belong_to_department([999999], self.cs))

    def test_subjects_in_order(self):
        self.assertEqual(subjects_in_order([self.b.pk, self.a.pk]), [self.b, self.a])


class CatalogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.dept = make_department()
        self.admin = make_user('adm', RoleName.ADMIN)
        self.student = make_user('stud', RoleName.STUDENT, department=self.dept)

    def test_student_can_list_but_not_create(self):
        make_subject('CS101', self.dept, laboratory_units=1, lecture_units=2)
        self.client.force_authenticate(self.student)
        resp = self.client.get('/api/catalog/subjects/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data[0]['units'], {'lecture': 2, 'laboratory': 1, 'total': 3})
        resp = self.client.post('/api/catalog/subjects/', {'code': 'X', 'title': 'X', 'department': self.dept.pk}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_admin_creates_subject(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post('/api/catalog/subjects/', {
            'code': 'CS201', 'title': 'Data Structures', 'department': self.dept.pk,
            'lecture_units': 2, 'laboratory_units': 1,
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(Subject.objects.get(code='CS201').total_units, 3)
