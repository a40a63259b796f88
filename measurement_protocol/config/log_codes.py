"""
Log codes for hit dispatch operations.
"""

TRANSPORT = "transport"

# Client resolution
CLIENT = f"{TRANSPORT}.client"
CLIENT_CREATED = f"{CLIENT}.created"
CLIENT_UNAVAILABLE = f"{CLIENT}.unavailable"
CLIENT_CLOSED = f"{CLIENT}.closed"

# Dispatch
DISPATCHED = f"{TRANSPORT}.dispatched"
COMPLETED = f"{TRANSPORT}.completed"
FAILED = f"{TRANSPORT}.failed"

# Pending requests
PENDING = f"{TRANSPORT}.pending"
PENDING_REGISTERED = f"{PENDING}.registered"
PENDING_DRAINING = f"{PENDING}.draining"
PENDING_DRAINED = f"{PENDING}.drained"

# Session
SESSION = "session"
SESSION_DISABLED = f"{SESSION}.disabled"
SESSION_ENQUEUED = f"{SESSION}.enqueued"
