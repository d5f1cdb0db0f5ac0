from django.urls import path

from . import views

urlpatterns = [
    path('', views.EnrollmentListCreateView.as_view(), name='enrollment-list'),
    path('available-subjects/', views.AvailableSubjectsView.as_view(), name='enrollment-available-subjects'),
    path('stats/summary/', views.EnrollmentStatsView.as_view(), name='enrollment-stats'),
    path('<int:pk>/', views.EnrollmentDetailView.as_view(), name='enrollment-detail'),
    path('<int:pk>/status/', views.EnrollmentStatusView.as_view(), name='enrollment-status'),
    path('<int:pk>/subjects/', views.EnrollmentSubjectsView.as_view(), name='enrollment-subjects'),
    path('<int:pk>/history/', views.EnrollmentHistoryView.as_view(), name='enrollment-history'),
]
