"""
Webhook handler interface.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from monday_sync.core.models import ProcessingResult, WebhookEvent


class BaseHandler(ABC):
    """
    Handles one kind of monday.com webhook event.

    Subclasses list the event types they accept in `event_types` and
    override can_handle() when they need narrower matching (one column of
    a column update, for example).
    """

    event_types: ClassVar[tuple[str, ...]] = ()

    def can_handle(self, event: WebhookEvent) -> bool:
        return event.type in self.event_types

    @abstractmethod
    def handle(self, event: WebhookEvent) -> ProcessingResult:
        """
        Process the event.

        Exceptions are not caught here; the webhook endpoint turns them
        into a 500 response.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {','.join(self.event_types)}>"
