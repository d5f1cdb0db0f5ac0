from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    ConflictCheckView,
    RoomScheduleView,
    ScheduleBlockViewSet,
    StudentScheduleView,
    TeacherScheduleView,
)

router = SimpleRouter()
router.register('', ScheduleBlockViewSet, basename='schedule')

urlpatterns = [
    path('conflicts/check/', ConflictCheckView.as_view(), name='schedule-conflicts-check'),
    path('teacher/<int:teacher_id>/', TeacherScheduleView.as_view(), name='schedule-teacher'),
    path('student/<int:student_id>/', StudentScheduleView.as_view(), name='schedule-student'),
    path('room/<str:room>/', RoomScheduleView.as_view(), name='schedule-room'),
    path('', include(router.urls)),
]
