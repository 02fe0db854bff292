# organizations/admin.py

from django.contrib import admin

from organizations.models import Membership, Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "vat_number", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "vat_number")


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "organization", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username", "organization__name")
