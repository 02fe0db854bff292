# finance/admin.py

from django.contrib import admin

from finance.models import FinancialAccount, Payment, PaymentMapping


@admin.register(FinancialAccount)
class FinancialAccountAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "kind",
        "organization",
        "iban",
        "initial_balance",
        "is_active",
    )
    list_filter = ("kind", "is_active", "organization")
    search_fields = ("name", "iban")


class PaymentMappingInline(admin.TabularInline):
    model = PaymentMapping
    extra = 0
    fields = ("installment", "amount", "updated_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Payments are created by reconciliation; the admin only inspects them."""

    list_display = (
        "date",
        "direction",
        "amount",
        "account",
        "method",
        "organization",
    )
    list_filter = ("direction", "method", "organization", "date")
    search_fields = ("description", "reference")
    readonly_fields = ("organization", "account", "direction", "amount", "created_at")
    inlines = [PaymentMappingInline]

    def has_add_permission(self, request):
        return False
