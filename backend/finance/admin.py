from django.contrib import admin

from .models import Discount, FeeItem, FinancialRecord, Payment
from .services import ledger


class FeeItemInline(admin.TabularInline):
    model = FeeItem
    extra = 0


class DiscountInline(admin.TabularInline):
    model = Discount
    extra = 0


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ('receipt_number', 'date', 'amount', 'payment_method', 'reference_number', 'received_by', 'balance_after')

    def has_add_permission(self, request, obj=None):
        # payments go through the ledger so settlement is announced
        return False


@admin.register(FinancialRecord)
class FinancialRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'student', 'academic_year', 'semester', 'total_due', 'remaining_balance', 'status')
    list_filter = ('status', 'academic_year', 'semester__name', 'scholarship_type')
    search_fields = ('student__username', 'student__student_number')
    readonly_fields = ('tuition_total', 'total_assessment', 'total_discounts', 'total_due', 'remaining_balance',
                       'enrollment_reference', 'created_by', 'updated_by', 'created_at', 'updated_at')
    inlines = (FeeItemInline, DiscountInline, PaymentInline)
    actions = ('recompute_totals',)

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        ledger.refresh_totals(form.instance)

    def recompute_totals(self, request, queryset):
        for record in queryset:
            ledger.refresh_totals(record)
        self.message_user(request, f'{queryset.count()} record(s) recomputed.')
    recompute_totals.short_description = 'Recompute totals'


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('receipt_number', 'record', 'amount', 'payment_method', 'date', 'received_by')
    list_filter = ('payment_method',)
    search_fields = ('receipt_number', 'reference_number', 'record__student__username')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
