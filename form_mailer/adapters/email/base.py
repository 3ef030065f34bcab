from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutboundMessage:
    """A plain-text email ready to hand to a provider."""

    sender: str
    to: list[str]
    subject: str
    text: str
    bcc: list[str] = field(default_factory=list)


class AbstractEmailClient(ABC):
    """Interface for transactional email providers."""

    @abstractmethod
    async def send(self, message: OutboundMessage) -> str:
        """Deliver a message.

        Args:
            message: Fully built outbound message.

        Returns:
            str: Provider-assigned message id.

        Raises:
            RuntimeError: If the provider rejects the message, the call fails
                or does not complete in time.
        """
        ...
