# messaging/urls.py

# Import path from django.urls because it's needed to define URL routes.
from django.urls import path
# Import views from .views because we need to map URLs to these functions.
from .views import conversations_view, messages_view

"""
This file defines the JSON endpoints for the 'messaging' app.
'messages/<pk>/' is shared: GET and POST take the other user's
id, DELETE takes the id of the message to remove.
"""
urlpatterns = [
    # Paginated list of conversations, newest first
    path('conversations/', conversations_view, name='conversations'),

    # Message history, send a message, or delete a message
    path('messages/<int:pk>/', messages_view, name='messages'),
]
