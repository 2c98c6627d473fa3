from typing import Any, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError

from event_nodes.util.const import ACTION_NOTIFY_FIELD


class ActorAction(BaseModel):
    """
    Decision returned by a node behavior after consuming one message.

    Only ``notify`` is inspected: when true the node notifies every listener.
    ``notify`` is strict, so ``1`` or ``"yes"`` are not accepted as true.
    """
    model_config = ConfigDict(frozen=True, extra='ignore')

    notify: StrictBool = False

    @classmethod
    def coerce(cls, value: Any) -> Tuple["ActorAction", bool]:
        """
        Turn a behavior result into an ActorAction.

        Accepts an ActorAction, a mapping carrying a ``notify`` key or an
        object exposing a ``notify`` attribute. Anything else is a contract
        violation and becomes ``ActorAction(notify=False)``.

        Returns:
            Tuple of (action, honored) where ``honored`` is False when the
            value did not satisfy the contract.
        """
        if isinstance(value, cls):
            return value, True

        if isinstance(value, Mapping):
            if ACTION_NOTIFY_FIELD not in value:
                return cls(), False
            raw = value[ACTION_NOTIFY_FIELD]
        elif value is not None and hasattr(value, ACTION_NOTIFY_FIELD):
            raw = getattr(value, ACTION_NOTIFY_FIELD)
        else:
            return cls(), False

        try:
            return cls(notify=raw), True
        except ValidationError:
            return cls(), False


NOTIFY = ActorAction(notify=True)
SILENT = ActorAction(notify=False)
