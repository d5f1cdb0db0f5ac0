from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.core.exceptions import ValidationError

from .models import User, Role, UserRole, validate_roles_for_user


class UserRoleForm(forms.ModelForm):
    class Meta:
        model = UserRole
        fields = '__all__'

    def clean(self):
        cleaned = super().clean()
        user = cleaned.get('user') or (self.instance.user if self.instance and self.instance.pk else None)
        role = cleaned.get('role') or (self.instance.role if self.instance and self.instance.pk else None)
        if user and role:
            existing = list(user.roles.all()) if user.pk else []
            try:
                validate_roles_for_user(user, existing + [role])
            except ValidationError as e:
                raise ValidationError(e.messages)
        return cleaned


class UserRoleInline(admin.TabularInline):
    model = UserRole
    form = UserRoleForm
    extra = 0


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    # inherit Django's user add/change forms which correctly handle password hashing
    list_display = ('username', 'email', 'student_number', 'department', 'year_level', 'is_staff', 'get_roles')
    list_filter = DjangoUserAdmin.list_filter + ('department',)
    search_fields = ('username', 'email', 'student_number', 'first_name', 'last_name')
    inlines = (UserRoleInline,)
    actions = ('deactivate_users',)

    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Registrar', {'fields': ('student_number', 'department', 'year_level')}),
    )

    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ('Registrar', {'fields': ('student_number', 'department', 'year_level')}),
    )

    def deactivate_users(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} user(s) deactivated.')
    deactivate_users.short_description = 'Deactivate selected users'

    def get_roles(self, obj):
        return ", ".join([r.name for r in obj.roles.all()])
    get_roles.short_description = 'Roles'


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'description', 'get_user_count')

    def get_user_count(self, obj):
        return obj.user_roles.count()
    get_user_count.short_description = 'Users'
