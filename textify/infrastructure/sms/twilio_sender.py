import logging
from typing import Optional

from twilio.rest import Client

from ...config import settings
from ...application.ports.sms_sender import SMSSender

logger = logging.getLogger(__name__)


class TwilioSMSSender(SMSSender):
    def __init__(self, client: Optional[Client] = None):
        self.client = client or Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    def send(self, body: str, from_: str, to: str) -> str:
        message = self.client.messages.create(body=body, from_=from_, to=to)
        logger.info(f"SMS sent successfully. SID: {message.sid}")
        return message.sid
