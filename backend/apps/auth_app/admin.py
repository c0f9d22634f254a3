from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('email', 'full_name', 'user', 'created_at')
    search_fields = ('email', 'full_name', 'first_name', 'last_name')
    readonly_fields = ('id', 'created_at', 'updated_at')
    raw_id_fields = ('user',)
