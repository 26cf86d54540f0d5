"""Configuration adapters."""

from techpro.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
