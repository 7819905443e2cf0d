"""Stream transports."""

from raidwatch.transport.telegram import TelegramTransport

__all__ = ["TelegramTransport"]
