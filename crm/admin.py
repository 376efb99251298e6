from django.contrib import admin

from .models import SalesProfile


@admin.register(SalesProfile)
class SalesProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "spp_code", "full_name", "updated_at")
    list_filter = ("role",)
    search_fields = ("user__username", "spp_code", "full_name", "backend_user_id")
