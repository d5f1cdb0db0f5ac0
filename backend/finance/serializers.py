from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from registrar.utils import snake_case_keys

from .models import Discount, FeeItem, FinancialRecord, Payment


class FeeItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = FeeItem
        fields = ('id', 'category', 'name', 'subject_code', 'amount', 'description')


class DiscountSerializer(serializers.ModelSerializer):
    class Meta:
        model = Discount
        fields = ('id', 'kind', 'percentage', 'amount', 'description')


class PaymentSerializer(serializers.ModelSerializer):
    received_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Payment
        fields = ('id', 'receipt_number', 'date', 'amount', 'payment_method', 'bank', 'check_number',
                  'reference_number', 'received_by', 'notes')
        read_only_fields = fields


class FinancialRecordSerializer(serializers.ModelSerializer):
    student = UserSummarySerializer(read_only=True)
    academic_year_name = serializers.CharField(source='academic_year.name', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)
    tuition_fee = serializers.SerializerMethodField()
    laboratory_fees = serializers.SerializerMethodField()
    miscellaneous_fees = serializers.SerializerMethodField()
    other_fees = serializers.SerializerMethodField()
    discounts = DiscountSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = FinancialRecord
        fields = (
            'id', 'student', 'academic_year', 'academic_year_name', 'semester', 'semester_name',
            'enrollment_reference', 'base_fee', 'tuition_fee', 'laboratory_fees', 'miscellaneous_fees',
            'other_fees', 'discounts', 'scholarship_type', 'scholarship_name', 'scholarship_tuition_pct',
            'scholarship_misc_pct', 'scholarship_lab_pct', 'scholarship_other_pct', 'total_assessment',
            'total_discounts', 'total_due', 'remaining_balance', 'status', 'due_date', 'payments', 'notes',
            'created_at', 'updated_at',
        )
        read_only_fields = fields

    def get_tuition_fee(self, obj):
        return {
            'totalUnits': obj.total_units,
            'perUnitFee': str(obj.per_unit_fee),
            'total': str(obj.tuition_total),
        }

    def _items(self, obj, category):
        return FeeItemSerializer([f for f in obj.fee_items.all() if f.category == category], many=True).data

    def get_laboratory_fees(self, obj):
        return self._items(obj, FeeItem.Category.LABORATORY)

    def get_miscellaneous_fees(self, obj):
        return self._items(obj, FeeItem.Category.MISCELLANEOUS)

    def get_other_fees(self, obj):
        return self._items(obj, FeeItem.Category.OTHER)


class FinancialRecordListSerializer(serializers.ModelSerializer):
    student = UserSummarySerializer(read_only=True)
    academic_year_name = serializers.CharField(source='academic_year.name', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)

    class Meta:
        model = FinancialRecord
        fields = ('id', 'student', 'academic_year', 'academic_year_name', 'semester', 'semester_name',
                  'enrollment_reference', 'total_units', 'total_due', 'remaining_balance', 'status', 'due_date')
        read_only_fields = fields


class CamelInputSerializer(serializers.Serializer):
    def to_internal_value(self, data):
        return super().to_internal_value(snake_case_keys(data))


class FeeItemInputSerializer(CamelInputSerializer):
    name = serializers.CharField(max_length=128)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    subject_code = serializers.CharField(required=False, allow_blank=True, default='')


class DiscountInputSerializer(CamelInputSerializer):
    kind = serializers.ChoiceField(choices=Discount.Kind.choices, required=False, default=Discount.Kind.OTHER)
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100,
                                          required=False, default=0)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    description = serializers.CharField(required=False, allow_blank=True, default='')


def _pct():
    return serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)


class FinancialRecordUpdateSerializer(CamelInputSerializer):
    base_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=FinancialRecord.Status.choices, required=False)
    scholarship_type = serializers.ChoiceField(choices=FinancialRecord.ScholarshipType.choices, required=False)
    scholarship_name = serializers.CharField(required=False, allow_blank=True)
    scholarship_tuition_pct = _pct()
    scholarship_misc_pct = _pct()
    scholarship_lab_pct = _pct()
    scholarship_other_pct = _pct()
    discounts = DiscountInputSerializer(many=True, required=False)
    miscellaneous_fees = FeeItemInputSerializer(many=True, required=False)
    other_fees = FeeItemInputSerializer(many=True, required=False)


class PaymentInputSerializer(CamelInputSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=Payment.Method.choices)
    bank = serializers.CharField(required=False, allow_blank=True)
    check_number = serializers.CharField(required=False, allow_blank=True)
    reference_number = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
