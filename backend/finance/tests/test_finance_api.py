from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import RoleName
from enrollment.models import Enrollment
from enrollment.services import enrollment_state
from registrar.testing import at, make_department, make_semester, make_subject, make_user, make_year


class FinanceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        dept = make_department()
        year = make_year()
        semester = make_semester(year)
        prog = make_subject('CS101', dept)
        lab = make_subject('CS102', dept, lecture_units=2, laboratory_units=1, total_units=3)
        self.student = make_user('stud', RoleName.STUDENT, department=dept, year_level=1)
        self.other = make_user('stud2', RoleName.STUDENT, department=dept, year_level=1)
        self.admin = make_user('adm', RoleName.ADMIN)
        self.cashier = make_user('cash', RoleName.CASHIER)
        self.enrollment, self.record = enrollment_state.create_enrollment(
            self.student, year, semester, [{'subject': prog.pk}, {'subject': lab.pk}], now=at(2025, 6, 1))
        self.base = f'/api/financial-records/{self.record.pk}/'

    def post_payment(self, amount, user=None):
        self.client.force_authenticate(user or self.cashier)
        return self.client.post(f'{self.base}payments/', {'amount': amount, 'paymentMethod': 'cash'}, format='json')

    def test_full_payment_response_and_auto_approval(self):
        resp = self.post_payment('7800')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['remainingBalance'], Decimal('0'))
        self.assertEqual(resp.data['receipt']['currentPayment'], Decimal('7800'))
        self.assertEqual(resp.data['payment']['receipt_number'], resp.data['receipt']['receiptNumber'])
        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.enrollment_status, Enrollment.Status.APPROVED)
        self.assertEqual(self.enrollment.approved_by, self.cashier)

    def test_student_cannot_post_payment(self):
        self.assertEqual(self.post_payment('100', user=self.student).status_code, 403)

    def test_zero_amount_rejected(self):
        resp = self.post_payment('0')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['message'], 'Payment amount must be greater than zero')

    def test_detail_visible_to_owner_only(self):
        self.client.force_authenticate(self.student)
        resp = self.client.get(self.base)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['total_due'], '7800.00')
        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.get(self.base).status_code, 403)

    def test_admin_adjustment(self):
        self.client.force_authenticate(self.cashier)
        self.assertEqual(self.client.patch(self.base, {'notes': 'x'}, format='json').status_code, 403)
        self.client.force_authenticate(self.admin)
        resp = self.client.patch(self.base, {'discounts': [{'kind': 'sibling', 'percentage': '10'}],
                                             'dueDate': '2025-07-01'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['total_due'], '7020.00')
        self.assertEqual(resp.data['due_date'], '2025-07-01')

    def test_list_with_summary(self):
        self.post_payment('800')
        resp = self.client.get('/api/financial-records/', {'status': 'partially paid'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['count'], 1)
        self.assertEqual(resp.data['summary']['totalCollected'], Decimal('800'))
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get('/api/financial-records/').status_code, 403)

    def test_receipt_json_and_pdf(self):
        self.post_payment('1000')
        self.client.force_authenticate(self.student)
        resp = self.client.get(f'{self.base}receipts/0/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['remainingBalance'], Decimal('6800'))
        resp = self.client.get(f'{self.base}receipts/0/', {'export': 'pdf'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp['Content-Type'], 'application/pdf')
        self.assertTrue(resp.content.startswith(b'%PDF'))
        self.assertEqual(self.client.get(f'{self.base}receipts/3/').status_code, 404)

    def test_summary_exports(self):
        self.post_payment('800')
        self.client.force_authenticate(self.admin)
        resp = self.client.get('/api/financial-records/reports/summary/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['summary'][0]['studentCount'], 1)

        resp = self.client.get('/api/financial-records/reports/summary/', {'export': 'xlsx'})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.content.startswith(b'PK'))
        self.assertIn('financial_summary.xlsx', resp['Content-Disposition'])

        resp = self.client.get('/api/financial-records/reports/summary/', {'export': 'csv'})
        self.assertTrue(resp.content.startswith(b'\xef\xbb\xbf'))
        self.assertIn(b'Academic Year', resp.content)

        resp = self.client.get('/api/financial-records/reports/summary/', {'export': 'doc'})
        self.assertEqual(resp.status_code, 400)
