from .notification import (
    ChannelStatusRead,
    DeliveryAttemptRead,
    EventAccepted,
    OverdueWarningEvent,
    RequestCreatedEvent,
    RequesterPayload,
    StatusChangedEvent,
    SystemMessageEvent,
    UrgentRequestEvent,
)

__all__ = [
    "ChannelStatusRead",
    "DeliveryAttemptRead",
    "EventAccepted",
    "OverdueWarningEvent",
    "RequestCreatedEvent",
    "RequesterPayload",
    "StatusChangedEvent",
    "SystemMessageEvent",
    "UrgentRequestEvent",
]
