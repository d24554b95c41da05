from django.contrib import admin

from .models import Store, StoreEmployee, StoreManager


class StoreManagerInline(admin.TabularInline):
    model = StoreManager
    extra = 0


class StoreEmployeeInline(admin.TabularInline):
    model = StoreEmployee
    extra = 0


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "join_code", "phone_number", "created_at")
    search_fields = ("name", "join_code", "address")
    inlines = [StoreManagerInline, StoreEmployeeInline]


@admin.register(StoreManager)
class StoreManagerAdmin(admin.ModelAdmin):
    list_display = ("store", "manager", "status", "is_primary", "created_at")
    list_filter = ("status", "is_primary")
    search_fields = ("store__name", "manager__email", "manager__full_name")


@admin.register(StoreEmployee)
class StoreEmployeeAdmin(admin.ModelAdmin):
    list_display = ("store", "employee", "created_at")
    search_fields = ("store__name", "employee__email", "employee__full_name")
