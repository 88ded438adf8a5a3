"""Base class for batch jobs."""

from abc import ABC, abstractmethod


class BaseProcessor(ABC):
    """
    A batch job over CRM records or board items.

    Jobs run from their module's main() or from the scheduler, and return
    the counters that go into their completion log line.
    """

    @abstractmethod
    def run(self) -> dict:
        pass
