"""Tracking-store client - reports terminal pipeline status over a webhook."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

STATUS_DONE = "PDF done"
STATUS_FAILED = "Failed"


class WebhookTrackingReporter:
    """Posts ``{tracking_id, status, ...}`` to the tracking store."""

    def __init__(self, webhook_url: str, timeout: float = 30.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def report(self, tracking_id: str, status: str, details: Optional[Dict[str, Any]] = None) -> bool:
        """
        Report terminal status for a tracked submission.

        Returns:
            True if the tracking store accepted the update, False otherwise
        """
        payload = {
            "tracking_id": tracking_id,
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(details or {}),
        }
        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"Tracking update timeout for {tracking_id} to {self.webhook_url}")
            return False
        except requests.exceptions.RequestException as e:
            logger.error(f"Tracking update error for {tracking_id} to {self.webhook_url}: {e}")
            return False

        if response.status_code in (200, 201, 202, 204):
            logger.info(
                "Tracking update accepted",
                extra={"tracking_id": tracking_id, "status": status, "status_code": response.status_code},
            )
            return True
        logger.warning(
            f"Tracking update failed for {tracking_id}: "
            f"status_code={response.status_code}, response={response.text}"
        )
        return False
