"""Outbound email hook.

Delivery is handled by an external provider; this implementation only logs
what would be sent so flows can be exercised locally.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class Mailer:
    def __init__(self, site_url: str) -> None:
        self._site_url = site_url.rstrip("/")

    def send_confirmation(self, email: str, token: str) -> str:
        link = f"{self._site_url}/auth/confirm?token={token}"
        logger.info("confirmation_email_queued", email=email)
        logger.debug("confirmation_email_link", email=email, link=link)
        return link

    def send_password_reset(self, email: str, token: str) -> str:
        link = f"{self._site_url}/auth/reset-password?token={token}"
        logger.info("password_reset_email_queued", email=email)
        logger.debug("password_reset_email_link", email=email, link=link)
        return link
