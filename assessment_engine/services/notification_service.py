"""
Outbound webhook fired when a respondent completes a quiz
"""
import logging
from typing import Any, Dict, Optional

import requests

from assessment_engine.config import settings

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Best-effort completion notifications

    Delivery failures are logged and swallowed; the respondent's
    submission has already succeeded by the time this runs.
    """

    EVENT_COMPLETED = "quiz.completed"

    def __init__(self, webhook_url: Optional[str] = None, timeout: float = 5.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def build_payload(self, respondent_id: int, quiz_id: int, result: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "event": self.EVENT_COMPLETED,
            "respondent_id": respondent_id,
            "quiz_id": quiz_id,
            "correct": result["correct"],
            "total": result["total"],
            "percentage": result["percentage"]
        }

    def notify_completion(self, respondent_id: int, quiz_id: int, result: Dict[str, Any]) -> bool:
        """
        POST the completion event to the configured webhook

        Returns:
            True when the webhook accepted the event
        """
        if not self.webhook_url:
            logger.debug("No notification webhook configured, skipping")
            return False

        payload = self.build_payload(respondent_id, quiz_id, result)

        try:
            response = requests.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(
                f"Completion notification failed for respondent={respondent_id}, "
                f"quiz={quiz_id}: {str(e)}"
            )
            return False

        logger.info(f"Completion notification sent: respondent={respondent_id}, quiz={quiz_id}")
        return True


# Global instance
notification_service = NotificationService(
    webhook_url=settings.NOTIFICATION_WEBHOOK_URL,
    timeout=settings.NOTIFICATION_TIMEOUT
)
