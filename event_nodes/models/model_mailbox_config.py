from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, PositiveInt

MailboxOverflowPolicy = Literal['reject_newest', 'drop_oldest']


class MailboxConfig(BaseModel):
    """
    Per-node mailbox settings.

    Attributes:
        capacity: Maximum number of pending messages, None for unbounded
        overflow: What a full mailbox does with a new message.
            ``reject_newest`` raises MailboxFull and keeps the queue as is,
            ``drop_oldest`` evicts the head to make room.
    """
    model_config = ConfigDict(frozen=True, extra='forbid')

    capacity: Optional[PositiveInt] = None
    overflow: MailboxOverflowPolicy = 'reject_newest'

    @property
    def bounded(self) -> bool:
        return self.capacity is not None

    @classmethod
    def from_value(cls, value: Any) -> "MailboxConfig":
        """Build a config from None, a dict or an existing MailboxConfig."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)
