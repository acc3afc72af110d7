"""Notification delivery errors raised by the email and SMS channels"""


class NotificationDeliveryError(Exception):
    """A channel could not hand the message to its provider"""

    def __init__(self, message: str, provider: str = None):
        super().__init__(message)
        self.provider = provider


class NotificationConfigError(NotificationDeliveryError):
    """Required credentials or settings for a channel are missing"""


class EmailDeliveryError(NotificationDeliveryError):
    pass


class SmsDeliveryError(NotificationDeliveryError):
    pass
