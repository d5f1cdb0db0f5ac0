from django.urls import path

from . import views

urlpatterns = [
    path('current/', views.CurrentCalendarView.as_view(), name='calendar_current'),
    path('enrollment-status/', views.EnrollmentStatusView.as_view(), name='calendar_enrollment_status'),
    path('years/', views.AcademicYearListCreateView.as_view(), name='calendar_years'),
    path('years/<int:pk>/', views.AcademicYearDetailView.as_view(), name='calendar_year_detail'),
    path('years/<int:pk>/semesters/', views.SemesterCreateView.as_view(), name='calendar_semester_create'),
    path('years/<int:pk>/semesters/<str:name>/', views.SemesterUpdateView.as_view(), name='calendar_semester_update'),
    path('init-default/', views.InitDefaultCalendarView.as_view(), name='calendar_init_default'),
]
