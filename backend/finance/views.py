import logging

from django.db.models import Q
from django.http import HttpResponse
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions_api import CanRecordPayments, IsRegistrarAdmin
from accounts.utils import can_record_payments, is_admin
from registrar.exceptions import AuthorizationError, NotFoundError, ValidationError
from registrar.pagination import StandardPagination
from registrar.utils import first_param

from .models import FinancialRecord
from .serializers import (
    FinancialRecordListSerializer,
    FinancialRecordSerializer,
    FinancialRecordUpdateSerializer,
    PaymentInputSerializer,
    PaymentSerializer,
)
from .services import ledger, reports

logger = logging.getLogger(__name__)

EXPORT_TYPES = {
    'xlsx': ('application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', reports.summary_workbook),
    'csv': ('text/csv; charset=utf-8', reports.summary_csv),
    'pdf': ('application/pdf', reports.summary_pdf),
}


def _detail_queryset():
    return FinancialRecord.objects.select_related('student', 'academic_year', 'semester').prefetch_related(
        'fee_items', 'discounts', 'payments__received_by')


def _get_record(pk, user) -> FinancialRecord:
    record = _detail_queryset().filter(pk=pk).first()
    if record is None:
        raise NotFoundError('Financial record not found')
    if record.student_id != user.pk and not can_record_payments(user):
        raise AuthorizationError('Not authorized to view this financial record')
    return record


def _attachment(data: bytes, content_type: str, filename: str) -> HttpResponse:
    resp = HttpResponse(data, content_type=content_type)
    resp['Content-Disposition'] = f'attachment; filename="{filename}"'
    return resp


class FinancialRecordListView(ListAPIView):
    serializer_class = FinancialRecordListSerializer
    permission_classes = (CanRecordPayments,)
    pagination_class = StandardPagination

    def get_queryset(self):
        params = self.request.query_params
        qs = FinancialRecord.objects.select_related('student', 'academic_year', 'semester')
        year = first_param(params, 'academic_year', 'academicYear')
        if year:
            qs = qs.filter(academic_year_id=year)
        semester = params.get('semester')
        if semester:
            qs = qs.filter(semester_id=semester) if semester.isdigit() else qs.filter(semester__name=semester)
        state = params.get('status')
        if state:
            qs = qs.filter(status=state)
        student = params.get('student')
        if student:
            qs = qs.filter(student_id=student)
        search = params.get('search')
        if search:
            qs = qs.filter(Q(student__student_number__icontains=search) | Q(student__username__icontains=search))
        return qs.order_by('-created_at', '-id')

    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        response = self.get_paginated_response(self.get_serializer(page, many=True).data)
        response.data['summary'] = ledger.list_totals(qs)
        return response


class FinancialRecordDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, pk: int):
        return Response(FinancialRecordSerializer(_get_record(pk, request.user)).data)

    def put(self, request, pk: int):
        if not is_admin(request.user):
            raise AuthorizationError('Administrator role required')
        record = FinancialRecord.objects.filter(pk=pk).first()
        if record is None:
            raise NotFoundError('Financial record not found')
        serializer = FinancialRecordUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ledger.update_record(record, dict(serializer.validated_data), actor=request.user)
        return Response(FinancialRecordSerializer(_detail_queryset().get(pk=pk)).data)

    patch = put


class PaymentCreateView(APIView):
    permission_classes = (CanRecordPayments,)

    def get(self, request, pk: int):
        record = _get_record(pk, request.user)
        return Response(PaymentSerializer(record.payments.all(), many=True).data)

    def post(self, request, pk: int):
        record = FinancialRecord.objects.filter(pk=pk).first()
        if record is None:
            raise NotFoundError('Financial record not found')
        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        payment = ledger.add_payment(
            record, data.pop('amount'), data.pop('payment_method'), received_by=request.user, **data)
        record.refresh_from_db()
        index = record.payments.filter(id__lt=payment.id).count()
        return Response({
            'message': 'Payment recorded successfully',
            'payment': PaymentSerializer(payment).data,
            'remainingBalance': record.remaining_balance,
            'status': record.status,
            'receipt': ledger.generate_receipt(record, index),
        })


class ReceiptView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, pk: int, index: int):
        record = _get_record(pk, request.user)
        receipt = ledger.generate_receipt(record, index)
        if request.query_params.get('export') == 'pdf':
            return _attachment(reports.render_receipt_pdf(receipt), 'application/pdf',
                               f"{receipt['receiptNumber']}.pdf")
        return Response(receipt)


class FinancialSummaryView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def get(self, request):
        params = request.query_params
        report = ledger.financial_summary(
            academic_year=first_param(params, 'academic_year', 'academicYear'),
            semester=params.get('semester'),
        )
        export_type = params.get('export')
        if not export_type:
            return Response(report)
        if export_type not in EXPORT_TYPES:
            raise ValidationError('export must be one of: xlsx, csv, pdf')
        content_type, render = EXPORT_TYPES[export_type]
        logger.info('Financial summary exported as %s by %s', export_type, request.user.username)
        return _attachment(render(report), content_type, f'financial_summary.{export_type}')
