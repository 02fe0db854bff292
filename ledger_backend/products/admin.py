# products/admin.py

from django.contrib import admin

from products.models import Product, ProductType, Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "organization", "is_active")
    list_filter = ("is_active", "organization")
    search_fields = ("code", "name")


@admin.register(ProductType)
class ProductTypeAdmin(admin.ModelAdmin):
    list_display = ("code", "description", "organization", "manage_stock")
    list_filter = ("manage_stock", "organization")
    search_fields = ("code", "description")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "organization",
        "product_type",
        "default_warehouse",
        "is_active",
    )
    list_filter = ("is_active", "organization", "product_type")
    search_fields = ("code", "name")
    readonly_fields = ("created_at", "updated_at")
