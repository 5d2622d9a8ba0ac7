from django.contrib import admin

from registrations.models import Registration, Resource


class RegistrationInline(admin.TabularInline):
    model = Registration
    extra = 0
    fields = ["registration_number", "identity", "status", "attended", "certificate_issued"]
    readonly_fields = fields
    can_delete = False
    show_change_link = True


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ["title", "kind", "status", "starts_at", "capacity"]
    list_filter = ["kind", "status"]
    search_fields = ["title"]
    readonly_fields = ["status"]
    inlines = [RegistrationInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = [
        "registration_number",
        "identity",
        "resource",
        "status",
        "payment_status",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "resource__kind"]
    search_fields = ["registration_number", "identity", "full_name"]
    readonly_fields = [
        "status",
        "attended",
        "attendance_percentage",
        "rating",
        "feedback",
        "certificate_requested",
        "certificate_issued",
        "payment_status",
        "cancelled_by",
        "confirmed_at",
        "cancelled_at",
        "attendance_marked_at",
        "certificate_issued_at",
        "agreed_at",
    ]
