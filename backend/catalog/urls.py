from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import DepartmentViewSet, SubjectViewSet

router = DefaultRouter()
router.register('departments', DepartmentViewSet, basename='catalog-department')
router.register('subjects', SubjectViewSet, basename='catalog-subject')

urlpatterns = [
    path('', include(router.urls)),
]
