"""Real-time infrastructure — in-process fan-out to WebSocket listeners.

Learn: Events flow in one direction:
1. Write handlers → Notifier.dispatch (fire-and-forget, after the Store commit)
2. Notifier → SubscriptionRegistry snapshot → Listener.send → WebSocket

Everything lives in this process's memory. A room's listeners are only
reachable from the process that accepted their connections.
"""
