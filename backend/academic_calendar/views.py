import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions_api import IsAdminOrReadOnly, IsRegistrarAdmin
from registrar.exceptions import NotFoundError

from .models import AcademicYear, Semester
from .serializers import AcademicYearSerializer, SemesterSerializer, period_details
from .services import calendar_authority

logger = logging.getLogger(__name__)


class CurrentCalendarView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        year = calendar_authority.current_academic_year()
        if year is None:
            raise NotFoundError('No active academic year found')
        semester = calendar_authority.current_semester(academic_year=year)
        window = calendar_authority.enrollment_window(semester=semester)
        return Response({
            'academicYear': AcademicYearSerializer(year).data,
            'currentSemester': SemesterSerializer(semester).data if semester else None,
            'enrollmentWindow': window.as_dict(),
        })


class EnrollmentStatusView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        year = calendar_authority.current_academic_year()
        semester = calendar_authority.current_semester(academic_year=year) if year else None
        window = calendar_authority.enrollment_window(semester=semester)
        return Response({
            'isOpen': window.open,
            'isLate': window.is_late,
            'penaltyFee': window.penalty_fee,
            'academicYear': year.name if year else None,
            'semester': semester.name if semester else None,
            'periodDetails': period_details(semester),
        })


class AcademicYearListCreateView(APIView):
    permission_classes = (IsAdminOrReadOnly,)

    def get(self, request):
        qs = AcademicYear.objects.prefetch_related('semesters__holiday_breaks').order_by('-start_date')
        return Response(AcademicYearSerializer(qs, many=True).data)

    def post(self, request):
        serializer = AcademicYearSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        semesters = data.pop('semesters', None)
        year = calendar_authority.create_academic_year(data, semesters=semesters)
        logger.info('Academic year %s created by %s', year.name, request.user.username)
        return Response({
            'message': 'Academic year created successfully',
            'academicYear': AcademicYearSerializer(year).data,
        }, status=status.HTTP_201_CREATED)


class AcademicYearDetailView(APIView):
    permission_classes = (IsAdminOrReadOnly,)

    def get(self, request, pk: int):
        year = get_object_or_404(AcademicYear, pk=pk)
        return Response(AcademicYearSerializer(year).data)

    def put(self, request, pk: int):
        year = get_object_or_404(AcademicYear, pk=pk)
        serializer = AcademicYearSerializer(year, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        # semesters are edited through their own endpoints
        data.pop('semesters', None)
        year = calendar_authority.update_academic_year(year, data)
        return Response({
            'message': 'Academic year updated successfully',
            'academicYear': AcademicYearSerializer(year).data,
        })

    patch = put


class SemesterCreateView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def post(self, request, pk: int):
        year = get_object_or_404(AcademicYear, pk=pk)
        serializer = SemesterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        semester = calendar_authority.add_semester(year, dict(serializer.validated_data))
        return Response({
            'message': 'Semester added successfully',
            'semester': SemesterSerializer(semester).data,
        }, status=status.HTTP_201_CREATED)


class SemesterUpdateView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def put(self, request, pk: int, name: str):
        semester = Semester.objects.filter(academic_year_id=pk, name=name).first()
        if semester is None:
            raise NotFoundError('Semester not found')
        serializer = SemesterSerializer(semester, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        semester = calendar_authority.update_semester(semester, dict(serializer.validated_data))
        return Response({
            'message': 'Semester updated successfully',
            'semester': SemesterSerializer(semester).data,
        })

    patch = put


class InitDefaultCalendarView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def post(self, request):
        start_year = request.data.get('start_year') or request.data.get('startYear')
        try:
            start_year = int(start_year) if start_year else None
        except (TypeError, ValueError):
            start_year = None
        year = calendar_authority.default_calendar(start_year)
        return Response({
            'message': 'Default academic year initialized successfully',
            'academicYear': AcademicYearSerializer(year).data,
        }, status=status.HTTP_201_CREATED)
