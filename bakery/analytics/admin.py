"""
Django admin configuration for analytics.
"""

from django.contrib import admin
from .models import DailySummary


@admin.register(DailySummary)
class DailySummaryAdmin(admin.ModelAdmin):
    list_display = ['date', 'total_sales', 'transaction_count', 'last_updated']
    date_hierarchy = 'date'
    readonly_fields = ['last_updated']
