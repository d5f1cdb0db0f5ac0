from django.db import models


class Department(models.Model):
    code = models.CharField(max_length=16, unique=True)
    name = models.CharField(max_length=128)
    # Short form for display (abbreviation) e.g. 'BSIT', 'BSCS'
    short_name = models.CharField(max_length=32, blank=True)

    class Meta:
        ordering = ('code',)

    def __str__(self):
        display = self.short_name or self.name
        return f"{self.code} - {display}"


DEFAULT_SUBJECT_UNITS = 3


class Subject(models.Model):
    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'

    SEMESTER_CHOICES = (
        ('1st', '1st'),
        ('2nd', '2nd'),
        ('Summer', 'Summer'),
    )

    code = models.CharField(max_length=32, unique=True)
    title = models.CharField(max_length=128)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='subjects')
    lecture_units = models.PositiveSmallIntegerField(default=0)
    laboratory_units = models.PositiveSmallIntegerField(default=0)
    # Billable units. Filled from lecture + laboratory when left at zero.
    total_units = models.PositiveSmallIntegerField(default=0)
    year_level = models.PositiveSmallIntegerField(null=True, blank=True)
    semester_name = models.CharField(max_length=8, choices=SEMESTER_CHOICES, blank=True)
    status = models.CharField(max_length=8, choices=Status.choices, default=Status.ACTIVE)

    class Meta:
        ordering = ('code',)

    def __str__(self):
        return f"{self.code} - {self.title}"

    def save(self, *args, **kwargs):
        if not self.total_units:
            self.total_units = (self.lecture_units or 0) + (self.laboratory_units or 0)
        super().save(*args, **kwargs)

    @property
    def billable_units(self) -> int:
        return self.total_units or DEFAULT_SUBJECT_UNITS
