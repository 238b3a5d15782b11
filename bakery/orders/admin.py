"""
Django admin configuration for bakery orders.
"""

from django.contrib import admin
from .models import Order, OrderProduct, Dispatch, DispatchItem, AuditLog, InvoiceSequence


class OrderProductInline(admin.TabularInline):
    model = OrderProduct
    extra = 0
    fields = ['position', 'name', 'quantity', 'price', 'produced', 'production_status', 'accounting_product_id']
    readonly_fields = ['produced']


class DispatchInline(admin.TabularInline):
    model = Dispatch
    extra = 0
    fields = ['destination', 'reported_by', 'reported_at', 'modified_at', 'notes']
    readonly_fields = ['reported_at', 'modified_at']
    show_change_link = True


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'customer_name', 'delivery_date', 'delivery_type', 'branch',
        'production_stage', 'dispatch_status', 'invoice_status', 'total_value',
    ]
    list_filter = ['production_stage', 'dispatch_status', 'invoice_status', 'delivery_type', 'branch']
    search_fields = ['customer_name', 'customer_phone', 'id']
    readonly_fields = ['id', 'version', 'dispatch_status', 'created_at', 'updated_at']
    date_hierarchy = 'delivery_date'
    inlines = [OrderProductInline, DispatchInline]


class DispatchItemInline(admin.TabularInline):
    model = DispatchItem
    extra = 0
    fields = ['order_product', 'name', 'quantity_sent']


@admin.register(Dispatch)
class DispatchAdmin(admin.ModelAdmin):
    list_display = ['order', 'destination', 'reported_by', 'reported_at']
    list_filter = ['destination', 'reported_at']
    search_fields = ['order__customer_name', 'destination']
    readonly_fields = ['id', 'reported_at', 'modified_at']
    inlines = [DispatchItemInline]


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['entity_type', 'entity_id', 'action', 'actor', 'timestamp']
    list_filter = ['entity_type', 'action', 'timestamp']
    search_fields = ['entity_id', 'actor']
    readonly_fields = ['id', 'timestamp']


@admin.register(InvoiceSequence)
class InvoiceSequenceAdmin(admin.ModelAdmin):
    list_display = ['prefix', 'last_value']
    readonly_fields = ['last_value']
