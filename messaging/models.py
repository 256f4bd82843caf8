# messaging/models.py

# Import models from django.db because this file defines database models.
from django.db import models
# Import settings from django.conf because 'Message' links to the User model.
from django.conf import settings

"""
A single direct message from 'sender' to 'receiver'. Rows are
never removed by the messaging core: deleting flips 'is_deleted'
and keeps the content, and every read path filters those rows out.
The auto-incrementing id doubles as creation order, so it breaks
ties between messages stamped with the same 'created_at'.
RT: New 'Message' rows are created live from the WebSocket chat
and from the REST endpoint, then pushed to both users' sessions.
"""
class Message(models.Model):
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='sent_messages', on_delete=models.CASCADE)
    receiver = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='received_messages', on_delete=models.CASCADE)
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    is_deleted = models.BooleanField(default=False)

    class Meta:
        ordering = ['created_at', 'id']
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(sender=models.F('receiver')),
                name='message_sender_not_receiver',
            ),
        ]
        indexes = [
            models.Index(fields=['sender', 'receiver', 'created_at'], name='message_pair_idx'),
        ]

    def __str__(self):
        return f"Message {self.pk} from {self.sender_id} to {self.receiver_id}"

    def counterpart_id(self, user_id):
        return self.receiver_id if self.sender_id == user_id else self.sender_id
