"""
Routes webhook events to the handler registered for them.

Handlers register at import time with @register_handler and are tried in
registration order.
"""

from typing import Type

from monday_sync.core.logging import get_logger
from monday_sync.core.models import WebhookEvent
from monday_sync.handlers.base import BaseHandler

log = get_logger(__name__)

# Handler class name -> instance
_registry: dict[str, BaseHandler] = {}


def register_handler(handler_class: Type[BaseHandler]) -> Type[BaseHandler]:
    """Class decorator adding one instance of handler_class to the registry."""
    name = handler_class.__name__
    if name in _registry:
        raise ValueError(f"Handler {name} is already registered")
    _registry[name] = handler_class()
    log.debug("handler_registered", handler=name, event_types=list(handler_class.event_types))
    return handler_class


def get_handler(event: WebhookEvent) -> BaseHandler | None:
    """First registered handler accepting event, or None."""
    return next((h for h in _registry.values() if h.can_handle(event)), None)


def get_all_handlers() -> dict[str, BaseHandler]:
    return dict(_registry)


def clear_handlers() -> None:
    _registry.clear()
