"""
ID generation rules.
Registry records are keyed by opaque random tokens generated server-side.
"""
import uuid


def new_record_id() -> str:
    """Generate a new record ID (random UUID4 string)."""
    return str(uuid.uuid4())
