from rest_framework import serializers

from .models import Department, Subject


class DepartmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = ('id', 'code', 'name', 'short_name')


class SubjectSerializer(serializers.ModelSerializer):
    department_code = serializers.CharField(source='department.code', read_only=True)
    units = serializers.SerializerMethodField()

    class Meta:
        model = Subject
        fields = ('id', 'code', 'title', 'department', 'department_code', 'lecture_units', 'laboratory_units',
                  'total_units', 'units', 'year_level', 'semester_name', 'status')
        extra_kwargs = {
            'lecture_units': {'write_only': True},
            'laboratory_units': {'write_only': True},
            'total_units': {'write_only': True},
        }

    def get_units(self, obj):
        return {'lecture': obj.lecture_units, 'laboratory': obj.laboratory_units, 'total': obj.total_units}
