from app.integrations.telegram import (
    TelegramAPIError,
    TelegramChannelFetcher,
    TelegramConfigError,
    TelegramError,
    TelegramMessage,
)
from app.integrations.unsplash import UnsplashImageFinder

__all__ = [
    "TelegramAPIError",
    "TelegramChannelFetcher",
    "TelegramConfigError",
    "TelegramError",
    "TelegramMessage",
    "UnsplashImageFinder",
]
