from django.contrib.auth import get_user_model
from rest_framework import serializers

from registrar.utils import snake_case_keys

from .models import ScheduleBlock

User = get_user_model()


class ScheduleBlockSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    teacher_name = serializers.SerializerMethodField()
    day_name = serializers.CharField(read_only=True)
    formatted_start_time = serializers.CharField(read_only=True)
    formatted_end_time = serializers.CharField(read_only=True)
    duration = serializers.IntegerField(read_only=True)
    except_dates = serializers.ListField(child=serializers.DateField(), required=False)

    class Meta:
        model = ScheduleBlock
        fields = (
            'id', 'course', 'course_code', 'course_title', 'teacher', 'teacher_name', 'academic_year',
            'section', 'schedule_type', 'room', 'day_of_week', 'day_name', 'start_time', 'end_time',
            'formatted_start_time', 'formatted_end_time', 'duration', 'is_recurring', 'specific_date',
            'start_date', 'end_date', 'except_dates', 'capacity', 'notes', 'status', 'created_at', 'updated_at',
        )
        read_only_fields = ('created_at', 'updated_at')

    def to_internal_value(self, data):
        return super().to_internal_value(snake_case_keys(data))

    def get_teacher_name(self, obj):
        t = obj.teacher
        return (t.get_full_name() or t.username) if t else None

    def validate_except_dates(self, value):
        # stored as ISO strings in the JSON column
        return sorted({d.isoformat() for d in value})
