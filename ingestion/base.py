"""
Abstract base class for the acquisition strategies of the fallback ladder
"""

from abc import ABC, abstractmethod
from schemas.contact import AcquisitionStage


class AcquisitionStrategy(ABC):
    """
    One rung of the fallback ladder.

    `acquire` returns raw CSV text or raises a ContactFeedError subclass;
    the runner parses the text and moves on to the next rung on failure.
    Strategies hold no state between calls.
    """

    stage: AcquisitionStage
    name: str = ""

    @abstractmethod
    async def acquire(self) -> str:
        """Return raw CSV text"""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(stage={self.stage.value})"
