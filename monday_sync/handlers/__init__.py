"""Webhook event handlers."""

from .base import BaseHandler
from .registry import register_handler, get_handler

# Import handlers to trigger registration via @register_handler decorator
from .files import CreatePulseHandler, FileColumnUpdateHandler

__all__ = [
    "BaseHandler",
    "register_handler",
    "get_handler",
    "CreatePulseHandler",
    "FileColumnUpdateHandler",
]
