from django.db import models
from django.contrib.auth.models import AbstractUser
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models.signals import m2m_changed
from django.dispatch import receiver


class RoleName:
    ADMIN = 'ADMIN'
    CASHIER = 'CASHIER'
    STUDENT = 'STUDENT'
    TEACHER = 'TEACHER'

    STAFF_ROLES = frozenset({ADMIN, CASHIER, TEACHER})


class User(AbstractUser):
    """
    Base user model.
    Students, teachers, cashiers and registrar admins are all users.
    What they may do is decided by roles.
    """
    roles = models.ManyToManyField(
        'Role',
        through='UserRole',
        related_name='users'
    )

    # Students enroll within their department; teachers are grouped by it.
    department = models.ForeignKey(
        'catalog.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='members'
    )
    year_level = models.PositiveSmallIntegerField(null=True, blank=True)
    student_number = models.CharField(max_length=32, unique=True, null=True, blank=True)

    def __str__(self):
        return self.username


def validate_roles_for_user(user, roles):
    """Validate that the given roles (iterable of Role instances or names) can be held together.

    A student account may not also hold staff roles. Raises `ValidationError`.
    """
    role_names = {getattr(r, 'name', str(r)).upper() for r in roles}
    if RoleName.STUDENT in role_names:
        invalid = role_names & RoleName.STAFF_ROLES
        if invalid:
            raise ValidationError(f'Invalid role(s) for a student account: {", ".join(sorted(invalid))}')


class Role(models.Model):
    """
    Logical role (STUDENT, TEACHER, CASHIER, ADMIN)
    """
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)

    def __str__(self):
        return self.name


class UserRole(models.Model):
    """
    Assigns a role to a user.
    A user can have multiple roles (TEACHER + ADMIN).
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )

    class Meta:
        unique_together = ('user', 'role')

    def __str__(self):
        return f"{self.user.username} -> {self.role.name}"

    def save(self, *args, **kwargs):
        existing = list(self.user.roles.all()) if self.user.pk else []
        validate_roles_for_user(self.user, existing + [self.role])
        return super().save(*args, **kwargs)


# Keep User.roles assignments safe (covers .roles.add usage)
@receiver(m2m_changed, sender=User.roles.through)
def _user_roles_changed(sender, instance, action, reverse, model, pk_set, **kwargs):
    if action == 'pre_add' and pk_set and not reverse:
        roles_to_add = list(model.objects.filter(pk__in=pk_set))
        validate_roles_for_user(instance, list(instance.roles.all()) + roles_to_add)
