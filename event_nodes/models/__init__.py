from event_nodes.models.model_actor_action import ActorAction, NOTIFY, SILENT
from event_nodes.models.model_mailbox_config import MailboxConfig, MailboxOverflowPolicy

__all__ = [
    "ActorAction",
    "NOTIFY",
    "SILENT",
    "MailboxConfig",
    "MailboxOverflowPolicy",
]
