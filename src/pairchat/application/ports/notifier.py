from __future__ import annotations

from typing import Protocol

from pairchat.domain.events.message_created import MessageCreated


class MessageNotifier(Protocol):
    async def deliver(self, event: MessageCreated) -> bool:
        """Push the message to its receiver. Returns True if anyone was connected."""
        ...
