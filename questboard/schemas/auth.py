"""Identity token schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Payload data extracted from access tokens."""

    sub: uuid.UUID
    exp: datetime
    type: str
