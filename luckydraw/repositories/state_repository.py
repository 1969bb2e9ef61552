"""Repository layer for the key-value widget state."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from luckydraw.models.state_record import StateRecord

logger = logging.getLogger(__name__)


class StateRepository:
    """Read and write JSON values by key."""

    def get(self, session: Session, key: str) -> Any | None:
        """Return the decoded value for ``key``, or ``None`` when absent.

        A value that no longer decodes is treated as absent.
        """

        record = session.get(StateRecord, key)
        if record is None:
            return None
        try:
            return json.loads(record.value)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable state for key %s", key)
            return None

    def put(self, session: Session, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        record = session.get(StateRecord, key)
        if record is None:
            session.add(StateRecord(key=key, value=payload))
        else:
            record.value = payload
        session.flush()

