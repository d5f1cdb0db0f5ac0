from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from registrar.utils import snake_case_keys

from .models import Enrollment, EnrollmentAction, SubjectLine


class SubjectLineSerializer(serializers.ModelSerializer):
    subject_code = serializers.CharField(source='subject.code', read_only=True)
    subject_title = serializers.CharField(source='subject.title', read_only=True)
    units = serializers.IntegerField(source='subject.billable_units', read_only=True)

    class Meta:
        model = SubjectLine
        fields = ('id', 'subject', 'subject_code', 'subject_title', 'units', 'section', 'status', 'remarks',
                  'added_at', 'dropped_at')
        read_only_fields = fields


class EnrollmentSerializer(serializers.ModelSerializer):
    student = UserSummarySerializer(read_only=True)
    academic_year_name = serializers.CharField(source='academic_year.name', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)
    department_code = serializers.CharField(source='department.code', read_only=True, default=None)
    subjects = SubjectLineSerializer(source='subject_lines', many=True, read_only=True)
    approved_by = UserSummarySerializer(read_only=True)
    rejected_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = (
            'id', 'student', 'academic_year', 'academic_year_name', 'semester', 'semester_name', 'year_level',
            'department', 'department_code', 'enrollment_status', 'subjects', 'date_submitted', 'date_approved',
            'date_rejected', 'approved_by', 'rejected_by', 'rejection_reason', 'notes', 'is_late',
            'late_penalty_fee', 'created_at', 'updated_at',
        )
        read_only_fields = fields


class EnrollmentActionSerializer(serializers.ModelSerializer):
    acted_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = EnrollmentAction
        fields = ('id', 'action', 'acted_by', 'remarks', 'acted_at')


class SubjectLineInputSerializer(serializers.Serializer):
    subject = serializers.IntegerField()
    section = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            data = {'subject': data}
        return super().to_internal_value(snake_case_keys(data))


class CamelInputSerializer(serializers.Serializer):
    def to_internal_value(self, data):
        return super().to_internal_value(snake_case_keys(data))


class EnrollmentCreateSerializer(CamelInputSerializer):
    academic_year = serializers.IntegerField(required=False)
    semester = serializers.CharField(required=False)
    subjects = SubjectLineInputSerializer(many=True, allow_empty=False)


class EnrollmentStatusSerializer(CamelInputSerializer):
    status = serializers.ChoiceField(choices=Enrollment.Status.choices)
    rejection_reason = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class AddDropSerializer(CamelInputSerializer):
    add_subjects = SubjectLineInputSerializer(many=True, required=False, default=list)
    drop_subjects = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
