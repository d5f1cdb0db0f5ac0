from typing import Optional

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Role

User = get_user_model()


class RoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ('id', 'name', 'description')


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ('id', 'username', 'name', 'email', 'student_number')

    def get_name(self, obj):
        full = obj.get_full_name()
        return full or obj.username


class MeSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    student_number = serializers.CharField(read_only=True)
    year_level = serializers.IntegerField(read_only=True)
    roles = serializers.SerializerMethodField()
    department = serializers.SerializerMethodField()

    def get_roles(self, obj):
        return [r.name for r in obj.roles.all()]

    def get_department(self, obj):
        dept = obj.department
        if dept is None:
            return None
        return {
            'id': dept.id,
            'code': dept.code,
            'name': dept.name,
            'short_name': dept.short_name,
        }


class IdentifierTokenObtainPairSerializer(serializers.Serializer):
    """Authenticate using `identifier` + `password` and return JWT pair.

    `identifier` may be an email (contains '@'), a student number or a username.
    """
    identifier = serializers.CharField(write_only=True)
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        identifier = attrs.get('identifier')
        password = attrs.get('password')

        if not identifier or not password:
            raise serializers.ValidationError('Must include "identifier" and "password".')

        user: Optional[User] = None

        if '@' in identifier:
            user = User.objects.filter(email__iexact=identifier).first()

        if user is None:
            user = User.objects.filter(student_number__iexact=identifier).first()

        if user is None:
            user = User.objects.filter(username__iexact=identifier).first()

        # generic error message to avoid leaking which part failed
        invalid_msg = 'Unable to log in with provided credentials.'

        if user is None or not user.check_password(password):
            raise serializers.ValidationError(invalid_msg)

        if not getattr(user, 'is_active', True):
            raise serializers.ValidationError('User account is disabled.')

        refresh = RefreshToken.for_user(user)
        refresh['roles'] = [r.name for r in user.roles.all()]

        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
