# finance/api/serializers.py

from decimal import Decimal

from rest_framework import serializers

from finance.models import FinancialAccount, Payment


class AllocationInputSerializer(serializers.Serializer):
    installment_id = serializers.UUIDField()
    # zero is accepted here and dropped after grouping
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class NewPaymentInputSerializer(serializers.Serializer):
    account_id = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01")
    )
    date = serializers.DateField()
    direction = serializers.ChoiceField(choices=Payment.Direction.choices)
    method = serializers.ChoiceField(
        choices=Payment.Method.choices, default=Payment.Method.TRANSFER
    )
    payment_type = serializers.CharField(
        max_length=20, required=False, allow_blank=True, default=""
    )
    reference = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    notes = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )


class ReconcileInputSerializer(serializers.Serializer):
    payment_id = serializers.UUIDField(required=False, allow_null=True)
    new_payment = NewPaymentInputSerializer(required=False, allow_null=True)
    allocations = AllocationInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        has_existing = attrs.get("payment_id") is not None
        has_new = attrs.get("new_payment") is not None
        if has_existing == has_new:
            raise serializers.ValidationError(
                "Provide exactly one of payment_id or new_payment."
            )
        return attrs


class ReconcileResultSerializer(serializers.Serializer):
    payment_id = serializers.UUIDField()
    payment_created = serializers.BooleanField()
    mapping_ids = serializers.ListField(child=serializers.UUIDField())


class PaymentListItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    date = serializers.DateField()
    direction = serializers.CharField()
    amount = serializers.CharField()
    allocated_amount = serializers.CharField()
    unallocated_amount = serializers.CharField()
    method = serializers.CharField()
    description = serializers.CharField()
    payment_type = serializers.CharField()
    reference = serializers.CharField()
    notes = serializers.CharField()
    account_id = serializers.UUIDField()
    account_name = serializers.CharField()


class InstallmentForAllocationSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    due_date = serializers.DateField()
    amount = serializers.CharField()
    paid_amount = serializers.CharField()
    residual = serializers.CharField()
    status = serializers.CharField()
    document_id = serializers.UUIDField()
    document_number = serializers.CharField()
    document_direction = serializers.CharField()
    notes = serializers.CharField()


class AccountBalanceSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    kind = serializers.CharField()
    iban = serializers.CharField()
    initial_balance = serializers.CharField()
    total_inflow = serializers.CharField()
    total_outflow = serializers.CharField()
    balance = serializers.CharField()


class FinancialAccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    kind = serializers.ChoiceField(
        choices=FinancialAccount.Kind.choices, default=FinancialAccount.Kind.BANK
    )
    iban = serializers.CharField(
        max_length=34, required=False, allow_blank=True, default=""
    )
    bic_swift = serializers.CharField(
        max_length=11, required=False, allow_blank=True, default=""
    )
    # may be negative (overdrawn opening balance)
    initial_balance = serializers.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
