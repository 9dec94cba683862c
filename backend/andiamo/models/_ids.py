from __future__ import annotations

import uuid


def new_id() -> str:
    """Opaque primary key (UUID4 text), matching the hosted Postgres schema."""
    return str(uuid.uuid4())
