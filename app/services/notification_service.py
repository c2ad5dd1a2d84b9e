from __future__ import annotations

import logging
from dataclasses import dataclass

from app.core.config import Settings
from app.services.email_client import SendGridEmailClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentConfirmation:
    client_name: str
    client_email: str
    date: str
    start_time: str
    end_time: str
    stylist_name: str


class AppointmentNotifier:
    def __init__(self, email_client: SendGridEmailClient | None, *, enabled: bool = True) -> None:
        self.email_client = email_client
        self.enabled = enabled

    def send_confirmation(self, confirmation: AppointmentConfirmation) -> bool:
        """
        Sends the booking confirmation e-mail.

        Returns False when delivery is disabled or unconfigured. Delivery
        failures raise ``EmailDeliveryError`` for the caller to log.
        """
        if not self.enabled or not self.email_client or not self.email_client.is_configured:
            logger.info(
                "Confirmation email skipped client_email=%s reason=not_configured",
                confirmation.client_email,
            )
            return False

        self.email_client.send_text_email(
            to_address=confirmation.client_email,
            subject="Appointment Confirmation",
            body=build_confirmation_body(confirmation),
        )
        logger.info("Confirmation email sent client_email=%s", confirmation.client_email)
        return True


def build_confirmation_body(confirmation: AppointmentConfirmation) -> str:
    return (
        f"Dear {confirmation.client_name},\n"
        "\n"
        "Your appointment has been confirmed!\n"
        "\n"
        "Details:\n"
        f"Date: {confirmation.date}\n"
        f"Time: {confirmation.start_time} - {confirmation.end_time}\n"
        f"Stylist: {confirmation.stylist_name}\n"
        "\n"
        "Thank you for choosing our service!\n"
    )


def create_appointment_notifier(settings: Settings) -> AppointmentNotifier:
    email_client = SendGridEmailClient(
        api_url=settings.sendgrid_api_url,
        api_key=settings.sendgrid_api_key,
        from_address=settings.email_from_address,
        timeout_seconds=settings.email_api_timeout_seconds,
    )
    return AppointmentNotifier(email_client, enabled=settings.notifications_enabled)
