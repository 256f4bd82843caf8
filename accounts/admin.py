# accounts/admin.py

# Import admin from django.contrib because this file configures the admin site.
from django.contrib import admin
# Import UserAdmin because the custom User keeps Django's user admin screens.
from django.contrib.auth.admin import UserAdmin
# Import models from .models because 'User' and 'Follow' need to be registered.
from .models import User, Follow


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'is_online', 'is_staff')
    list_filter = UserAdmin.list_filter + ('is_online',)
    fieldsets = UserAdmin.fieldsets + (
        ('Chat', {'fields': ('avatar_url', 'is_online')}),
    )


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('follower', 'following', 'created_at')
    raw_id_fields = ('follower', 'following')
