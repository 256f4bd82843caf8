# messaging/registry.py

# Import threading because sessions are registered from several threads.
import threading
# Import defaultdict from collections because each user maps to a set of channel names.
from collections import defaultdict

"""
The in-memory map from user id to that user's live connections.
A connection is identified by its Channels 'channel_name', and one
user may hold several at once (several tabs, several devices).

The registry never sends anything itself. 'deregister' reports
whether the connection was the user's last one so the presence
tracker can decide whether the user really went offline.

One instance is created by the messaging app config and handed to
the consumer, the presence tracker and the delivery engine. The
lock is there because REST views read it from worker threads.
RT: This is the routing table for every live event.
"""
class SessionRegistry:
    def __init__(self):
        self._sessions = defaultdict(set)
        self._lock = threading.Lock()

    def register(self, user_id, connection_id):
        with self._lock:
            self._sessions[user_id].add(connection_id)

    def deregister(self, user_id, connection_id):
        with self._lock:
            connections = self._sessions.get(user_id)
            if not connections or connection_id not in connections:
                return False
            connections.discard(connection_id)
            if connections:
                return False
            del self._sessions[user_id]
            return True

    def connections_for(self, user_id):
        with self._lock:
            return frozenset(self._sessions.get(user_id, ()))

    def is_online(self, user_id):
        with self._lock:
            return bool(self._sessions.get(user_id))

    def online_user_ids(self):
        with self._lock:
            return set(self._sessions)

    def __len__(self):
        with self._lock:
            return sum(len(connections) for connections in self._sessions.values())
