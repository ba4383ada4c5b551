"""Configuration module for the KADA Connect backend."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
