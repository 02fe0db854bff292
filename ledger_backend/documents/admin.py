# documents/admin.py
"""
=====================================================
PATH: documents/admin.py
=====================================================

Admin rules:

- Lines of a posted document are read-only here. Edits of posted documents
  go through documents.services.posting.update_document_lines so the stock
  ledger and the annual stats stay consistent.
- Posting is an admin action routed through post_document().
"""

from __future__ import annotations

from django.contrib import admin, messages

from core.exceptions import LedgerError
from documents.models import Document, DocumentLine, DocumentType, Installment
from documents.services.posting import post_document


@admin.register(DocumentType)
class DocumentTypeAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "organization",
        "direction",
        "inventory_movement",
        "operation_sign_stock",
        "valuation_impact",
        "operation_sign_valuation",
        "is_active",
    )
    list_filter = (
        "direction",
        "inventory_movement",
        "valuation_impact",
        "organization",
    )
    search_fields = ("code", "name")


class DocumentLineInline(admin.TabularInline):
    model = DocumentLine
    extra = 0
    fields = (
        "position",
        "product",
        "warehouse",
        "description",
        "quantity",
        "unit_price",
        "net_amount",
    )

    def has_add_permission(self, request, obj=None):
        return obj is None or not obj.is_posted

    def has_change_permission(self, request, obj=None):
        return obj is None or not obj.is_posted

    def has_delete_permission(self, request, obj=None):
        return obj is None or not obj.is_posted


class InstallmentInline(admin.TabularInline):
    model = Installment
    extra = 0
    fields = ("due_date", "amount", "notes")


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ("number", "document_type", "organization", "date", "posted_at")
    list_filter = ("document_type__direction", "organization", "date")
    search_fields = ("number", "notes")
    readonly_fields = ("posted_at", "created_at")
    inlines = [DocumentLineInline, InstallmentInline]
    actions = ["post_selected"]

    @admin.action(description="Post selected documents (stock + valuation)")
    def post_selected(self, request, queryset):
        posted = 0
        for document in queryset.filter(posted_at__isnull=True):
            try:
                post_document(
                    organization_id=document.organization_id,
                    document_id=document.id,
                    user_id=request.user.pk,
                )
            except LedgerError as exc:
                self.message_user(
                    request,
                    f"{document.number or document.id}: {exc.message}",
                    level=messages.ERROR,
                )
                continue
            posted += 1

        if posted:
            self.message_user(request, f"Posted {posted} document(s).")


@admin.register(Installment)
class InstallmentAdmin(admin.ModelAdmin):
    list_display = ("document", "due_date", "amount", "organization")
    list_filter = ("organization", "due_date")
    search_fields = ("document__number", "notes")
