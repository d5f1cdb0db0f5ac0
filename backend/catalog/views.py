from rest_framework import viewsets

from accounts.permissions_api import IsAdminOrReadOnly

from .models import Department, Subject
from .serializers import DepartmentSerializer, SubjectSerializer


class DepartmentViewSet(viewsets.ModelViewSet):
    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    permission_classes = (IsAdminOrReadOnly,)


class SubjectViewSet(viewsets.ModelViewSet):
    queryset = Subject.objects.select_related('department')
    serializer_class = SubjectSerializer
    permission_classes = (IsAdminOrReadOnly,)

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get('department'):
            qs = qs.filter(department_id=params.get('department'))
        if params.get('status'):
            qs = qs.filter(status=params.get('status'))
        return qs
