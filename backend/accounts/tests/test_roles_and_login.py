from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Role, RoleName
from accounts.utils import can_record_payments, is_admin, is_student, user_role_names
from registrar.testing import make_department, make_user


class RoleTests(TestCase):
    def test_seeded_roles_exist(self):
        names = set(Role.objects.values_list('name', flat=True))
        self.assertTrue({'ADMIN', 'CASHIER', 'STUDENT', 'TEACHER'} <= names)

    def test_student_cannot_hold_staff_role(self):
        student = make_user('stud', RoleName.STUDENT)
        with self.assertRaises(ValidationError):
            student.roles.add(Role.objects.get(name=RoleName.TEACHER))

    def test_role_helpers(self):
        admin = make_user('adm', RoleName.ADMIN)
        cashier = make_user('cash', RoleName.CASHIER)
        student = make_user('stud', RoleName.STUDENT)
        self.assertTrue(is_admin(admin))
        self.assertFalse(is_admin(cashier))
        self.assertTrue(can_record_payments(cashier))
        self.assertTrue(can_record_payments(admin))
        self.assertFalse(can_record_payments(student))
        self.assertTrue(is_student(student))
        self.assertEqual(user_role_names(student), {'STUDENT'})

    def test_superuser_is_admin(self):
        from django.contrib.auth import get_user_model
        root = get_user_model().objects.create_superuser('root', 'root@example.com', 'pw')
        self.assertTrue(is_admin(root))


class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.dept = make_department()
        self.student = make_user('stud', RoleName.STUDENT, department=self.dept, year_level=1,
                                 email='stud@example.com', student_number='2025-0001')

    def test_login_by_student_number(self):
        resp = self.client.post('/api/accounts/token/', {'identifier': '2025-0001', 'password': 'pass1234'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('access', resp.data)

    def test_login_by_email(self):
        resp = self.client.post('/api/accounts/token/', {'identifier': 'stud@example.com', 'password': 'pass1234'}, format='json')
        self.assertEqual(resp.status_code, 200)

    def test_bad_password(self):
        resp = self.client.post('/api/accounts/token/', {'identifier': 'stud', 'password': 'nope'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('message', resp.data)

    def test_me(self):
        self.client.force_authenticate(self.student)
        resp = self.client.get('/api/accounts/me/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['roles'], ['STUDENT'])
        self.assertEqual(resp.data['department']['code'], 'CS')

    def test_me_requires_auth(self):
        resp = self.client.get('/api/accounts/me/')
        self.assertEqual(resp.status_code, 401)
