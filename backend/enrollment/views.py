import logging

from django.db.models import Prefetch
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academic_calendar.models import AcademicYear, Semester
from academic_calendar.services import calendar_authority
from accounts.permissions_api import IsRegistrarAdmin
from accounts.utils import is_admin, is_student, is_teacher
from catalog.serializers import SubjectSerializer
from catalog.services import catalog
from finance.models import FinancialRecord
from finance.serializers import FinancialRecordSerializer
from registrar.exceptions import AuthorizationError, NotFoundError, ValidationError
from registrar.pagination import StandardPagination
from registrar.utils import first_param

from .models import Enrollment, SubjectLine
from .serializers import (
    AddDropSerializer,
    EnrollmentActionSerializer,
    EnrollmentCreateSerializer,
    EnrollmentSerializer,
    EnrollmentStatusSerializer,
)
from .services import enrollment_state, stats

logger = logging.getLogger(__name__)


def _base_queryset():
    return Enrollment.objects.select_related(
        'student', 'academic_year', 'semester', 'department', 'approved_by', 'rejected_by',
    ).prefetch_related(Prefetch('subject_lines', queryset=SubjectLine.objects.select_related('subject')))


def _get_enrollment(pk, user) -> Enrollment:
    enrollment = _base_queryset().filter(pk=pk).first()
    if enrollment is None:
        raise NotFoundError('Enrollment not found')
    if enrollment.student_id != user.pk and not is_admin(user):
        raise AuthorizationError('Not authorized to view this enrollment')
    return enrollment


def _record_payload(enrollment):
    record = FinancialRecord.objects.filter(enrollment_reference=enrollment).prefetch_related(
        'fee_items', 'discounts', 'payments__received_by').first()
    return FinancialRecordSerializer(record).data if record is not None else None


def _resolve_term(academic_year_id, semester_ref):
    """Pick the year/semester named in the request, defaulting to the current ones."""
    if academic_year_id:
        year = AcademicYear.objects.filter(pk=academic_year_id).first()
        if year is None:
            raise NotFoundError('Academic year not found')
    else:
        year = calendar_authority.current_academic_year()
        if year is None:
            raise NotFoundError('No active academic year found')

    if semester_ref:
        lookup = {'pk': semester_ref} if str(semester_ref).isdigit() else {'name': semester_ref}
        semester = Semester.objects.filter(academic_year=year, **lookup).first()
    else:
        semester = calendar_authority.current_semester(academic_year=year)
    if semester is None:
        raise NotFoundError('Semester not found')
    return year, semester


class EnrollmentListCreateView(ListAPIView):
    serializer_class = EnrollmentSerializer
    permission_classes = (IsAuthenticated,)
    pagination_class = StandardPagination

    def get_queryset(self):
        user = self.request.user
        params = self.request.query_params
        qs = _base_queryset()
        if is_admin(user):
            pass
        elif is_teacher(user):
            # teachers see enrollments of their department
            qs = qs.filter(department_id=user.department_id) if user.department_id else qs.none()
        else:
            qs = qs.filter(student=user)

        year = first_param(params, 'academic_year', 'academicYear')
        if year:
            qs = qs.filter(academic_year_id=year)
        semester = params.get('semester')
        if semester:
            qs = qs.filter(semester_id=semester) if semester.isdigit() else qs.filter(semester__name=semester)
        department = params.get('department')
        if department:
            qs = qs.filter(department_id=department) if department.isdigit() else qs.filter(
                department__code__iexact=department)
        state = first_param(params, 'status', 'enrollment_status')
        if state:
            qs = qs.filter(enrollment_status=state)
        student = params.get('student')
        if student and is_admin(user):
            qs = qs.filter(student_id=student)
        return qs.order_by('-date_submitted', '-id')

    def post(self, request):
        if not is_student(request.user):
            raise AuthorizationError('Only students can submit enrollments')
        serializer = EnrollmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        year, semester = _resolve_term(data.get('academic_year'), data.get('semester'))
        enrollment, record = enrollment_state.create_enrollment(request.user, year, semester, data['subjects'])
        enrollment = _base_queryset().get(pk=enrollment.pk)
        return Response({
            'message': 'Enrollment submitted successfully',
            'enrollment': EnrollmentSerializer(enrollment).data,
            'financialRecord': _record_payload(enrollment),
        }, status=status.HTTP_201_CREATED)


class EnrollmentDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, pk: int):
        enrollment = _get_enrollment(pk, request.user)
        return Response({
            'enrollment': EnrollmentSerializer(enrollment).data,
            'financialRecord': _record_payload(enrollment),
        })


class EnrollmentStatusView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def patch(self, request, pk: int):
        enrollment = Enrollment.objects.filter(pk=pk).first()
        if enrollment is None:
            raise NotFoundError('Enrollment not found')
        serializer = EnrollmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        enrollment_state.change_status(
            enrollment, request.user, data['status'],
            reason=data.get('rejection_reason'),
            notes=data.get('notes'),
        )
        return Response(EnrollmentSerializer(_base_queryset().get(pk=pk)).data)


class EnrollmentSubjectsView(APIView):
    permission_classes = (IsAuthenticated,)

    def patch(self, request, pk: int):
        enrollment = Enrollment.objects.filter(pk=pk).first()
        if enrollment is None:
            raise NotFoundError('Enrollment not found')
        serializer = AddDropSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        enrollment_state.add_drop(enrollment, request.user, data['add_subjects'], data['drop_subjects'])
        return Response(EnrollmentSerializer(_base_queryset().get(pk=pk)).data)


class EnrollmentHistoryView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, pk: int):
        enrollment = _get_enrollment(pk, request.user)
        actions = enrollment.actions.select_related('acted_by')
        return Response(EnrollmentActionSerializer(actions, many=True).data)


class AvailableSubjectsView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        user = request.user
        if user.department_id is None:
            raise ValidationError('No department assigned')
        year_level = first_param(request.query_params, 'year_level', 'yearLevel', default=user.year_level)
        semester = request.query_params.get('semester')
        if not semester:
            current = calendar_authority.current_semester()
            semester = current.name if current is not None else None
        qs = catalog.available_subjects(user.department, year_level=year_level, semester_name=semester)
        return Response(SubjectSerializer(qs.order_by('code'), many=True).data)


class EnrollmentStatsView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def get(self, request):
        params = request.query_params
        return Response(stats.enrollment_summary(
            academic_year=first_param(params, 'academic_year', 'academicYear'),
            semester=params.get('semester'),
        ))
