# accounts/models.py

from django.db import models
from django.contrib.auth.models import AbstractUser

"""
The account behind every connection. Profile CRUD lives outside
this core, so the model only carries what messaging needs: the
display fields copied into message payloads and the 'is_online'
flag, which only the presence tracker writes.
RT: 'is_online' is flipped live as sessions connect and disconnect.
"""
class User(AbstractUser):
    avatar_url = models.URLField(max_length=500, blank=True, default='')
    is_online = models.BooleanField(default=False)

    def __str__(self):
        return self.username


"""
A directed follow edge. 'follower' follows 'following'. The
messaging core only reads these: a message may be sent when the
sender follows the receiver, and presence updates go out to the
people following a user.
"""
class Follow(models.Model):
    follower = models.ForeignKey(User, related_name='following_edges', on_delete=models.CASCADE)
    following = models.ForeignKey(User, related_name='follower_edges', on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['follower', 'following'], name='unique_follow_edge'),
        ]

    def __str__(self):
        return f"{self.follower} follows {self.following}"
