"""
Audit trail of access decisions.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class AuditLogger:
    """Keeps the most recent access decisions in memory."""

    def __init__(self, max_entries: int = 1000):
        self.logs: deque = deque(maxlen=max_entries)

    def log_event(
        self,
        event_type: str,
        path: str,
        asset_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Record an access decision."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "path": path,
            "asset_id": asset_id,
            "correlation_id": correlation_id,
            **kwargs,
        }
        self.logs.append(log_entry)
        logger.info("Audit log: %s", log_entry)
        return log_entry

    def get_logs(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Get recent audit logs."""
        return list(self.logs)[-limit:]
