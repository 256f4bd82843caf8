# messaging/admin.py

# Import admin from django.contrib because this file configures the admin site.
from django.contrib import admin
# Import Message from .models because it needs to be registered.
from .models import Message

"""
Makes stored messages visible in the Django admin, including the
soft-deleted ones, so an administrator can audit a conversation.
"""
@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'receiver', 'created_at', 'is_deleted')
    list_filter = ('is_deleted',)
    raw_id_fields = ('sender', 'receiver')
    search_fields = ('content', 'sender__username', 'receiver__username')
