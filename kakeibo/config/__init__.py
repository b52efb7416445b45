"""Configuration package."""

from kakeibo.config.settings import (
    KakeiboSettings,
    get_settings,
)

__all__ = [
    "KakeiboSettings",
    "get_settings",
]
