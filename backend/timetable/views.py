import datetime
import logging

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions_api import IsAdminOrReadOnly, IsRegistrarAdmin
from accounts.utils import is_admin, is_teacher
from registrar.exceptions import AuthorizationError, NotFoundError, ValidationError
from registrar.utils import first_param

from .models import ScheduleBlock
from .serializers import ScheduleBlockSerializer
from .services import conflict_detector

logger = logging.getLogger(__name__)


def _filter_blocks(qs, params):
    for param, lookup in (
        ('academic_year', 'academic_year_id'),
        ('teacher', 'teacher_id'),
        ('course', 'course_id'),
        ('day_of_week', 'day_of_week'),
        ('status', 'status'),
    ):
        value = first_param(params, param, ''.join(p.title() if i else p for i, p in enumerate(param.split('_'))))
        if value is not None:
            qs = qs.filter(**{lookup: value})
    room = params.get('room')
    if room:
        qs = qs.filter(room__iexact=room.strip())
    return qs


class ScheduleBlockViewSet(viewsets.ModelViewSet):
    queryset = ScheduleBlock.objects.select_related('course', 'teacher', 'academic_year')
    serializer_class = ScheduleBlockSerializer
    permission_classes = (IsAdminOrReadOnly,)
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        return _filter_blocks(super().get_queryset(), self.request.query_params)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        block = conflict_detector.create_block(dict(serializer.validated_data), actor=request.user)
        return Response(self.get_serializer(block).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        block = self.get_object()
        serializer = self.get_serializer(block, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        block = conflict_detector.update_block(block, dict(serializer.validated_data), actor=request.user)
        return Response(self.get_serializer(block).data)

    def destroy(self, request, *args, **kwargs):
        # blocks are never physically removed
        block = conflict_detector.cancel_block(self.get_object(), actor=request.user)
        return Response({'message': 'Schedule cancelled successfully', 'schedule': self.get_serializer(block).data})

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        block = conflict_detector.cancel_block(self.get_object(), actor=request.user)
        return Response({'message': 'Schedule cancelled successfully', 'schedule': self.get_serializer(block).data})


class ConflictCheckView(APIView):
    permission_classes = (IsRegistrarAdmin,)

    def get(self, request):
        params = request.query_params
        day, start, end = conflict_detector.validate_times(
            first_param(params, 'day_of_week', 'dayOfWeek'),
            first_param(params, 'start_time', 'startTime'),
            first_param(params, 'end_time', 'endTime'),
        )
        room = params.get('room')
        teacher = params.get('teacher')
        exclude = first_param(params, 'schedule_id', 'scheduleId')
        if not room and not teacher:
            raise ValidationError('room or teacher is required')
        report = conflict_detector.find_conflicts(day, start, end, room=room, teacher=teacher, exclude_id=exclude)
        return Response({
            'hasConflicts': report.has_conflicts,
            'roomConflicts': [conflict_detector.conflict_entry(b) for b in report.room_conflicts],
            'teacherConflicts': [conflict_detector.conflict_entry(b) for b in report.teacher_conflicts],
        })


class TeacherScheduleView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, teacher_id: int):
        if request.user.pk != teacher_id and not is_admin(request.user):
            raise AuthorizationError("Not authorized to view this teacher's schedule")
        teacher = get_object_or_404(get_user_model(), pk=teacher_id)
        qs = ScheduleBlock.objects.select_related('course', 'teacher').filter(teacher=teacher)
        year = first_param(request.query_params, 'academic_year', 'academicYear')
        if year:
            qs = qs.filter(academic_year_id=year)
        if not request.query_params.get('include_inactive'):
            qs = qs.filter(status=ScheduleBlock.Status.ACTIVE)
        return Response(ScheduleBlockSerializer(qs.order_by('day_of_week', 'start_time'), many=True).data)


class RoomScheduleView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, room: str):
        params = request.query_params
        qs = ScheduleBlock.objects.select_related('course', 'teacher').filter(room__iexact=room.strip())
        year = first_param(params, 'academic_year', 'academicYear')
        if year:
            qs = qs.filter(academic_year_id=year)
        if not first_param(params, 'include_inactive', 'includeInactive'):
            qs = qs.filter(status=ScheduleBlock.Status.ACTIVE)
        on = params.get('date')
        if on:
            try:
                day = datetime.date.fromisoformat(on)
            except ValueError:
                raise ValidationError('date must be YYYY-MM-DD')
            # Python weekday() is Monday=0; blocks use Sunday=0
            qs = qs.filter(day_of_week=(day.weekday() + 1) % 7)
        return Response(ScheduleBlockSerializer(qs.order_by('day_of_week', 'start_time'), many=True).data)


class StudentScheduleView(APIView):
    """Active blocks for the subjects a student is currently enrolled in."""
    permission_classes = (IsAuthenticated,)

    def get(self, request, student_id: int):
        from enrollment.models import SubjectLine

        user = request.user
        if user.pk != student_id and not (is_admin(user) or is_teacher(user)):
            raise AuthorizationError("Not authorized to view this student's schedule")
        student = get_user_model().objects.filter(pk=student_id).first()
        if student is None:
            raise NotFoundError('Student not found')
        lines = SubjectLine.objects.filter(enrollment__student=student, status=SubjectLine.Status.ENROLLED)
        year = first_param(request.query_params, 'academic_year', 'academicYear')
        if year:
            lines = lines.filter(enrollment__academic_year_id=year)
        qs = ScheduleBlock.objects.select_related('course', 'teacher').filter(
            course_id__in=lines.values('subject_id'), status=ScheduleBlock.Status.ACTIVE)
        if year:
            qs = qs.filter(academic_year_id=year)
        return Response(ScheduleBlockSerializer(qs.order_by('day_of_week', 'start_time'), many=True).data)
