from django.contrib import admin

from .models import Availability, Schedule, Shift


class ShiftInline(admin.TabularInline):
    model = Shift
    extra = 0
    fields = ("employee", "start_time", "end_time", "notes", "original_employee_name")


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ("store", "week_start_date", "published", "updated_at")
    list_filter = ("published", "store")
    search_fields = ("store__name",)
    inlines = [ShiftInline]


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ("schedule", "employee", "start_time", "end_time", "original_employee_name")
    list_filter = ("schedule__store",)
    search_fields = ("employee__email", "employee__full_name", "original_employee_name")


@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ("user", "store", "date", "status", "start_time", "end_time")
    list_filter = ("status", "store", "date")
    search_fields = ("user__email", "user__full_name", "store__name")
