from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'product_type', 'price', 'location', 'status', 'agent', 'created_at']
    list_filter = ['product_type', 'status', 'agent']
    search_fields = ['title', 'description', 'location']
    list_editable = ['status']
    ordering = ['-created_at']
    list_per_page = 50
    readonly_fields = ['created_at', 'updated_at']
