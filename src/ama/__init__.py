"""AMA — live Q&A backend.

Rooms hold questions (messages), the audience reacts to them and the host
marks them answered. Every change is pushed to the room's live WebSocket
listeners through the in-process realtime hub.
"""

__version__ = "0.1.0"
