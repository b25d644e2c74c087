"""Use cases that turn purchase-request events into delivered notifications."""

from .background import BackgroundDispatcher, log_error_sink
from .delivery_records import DeliveryRecordStore
from .events import STATUS_ROUTES
from .orchestrator import QUEUE_TIMEOUT_ERROR, TIMEOUT_ERROR, DeliveryOrchestrator
from .recipients import RecipientResolver, RecipientSettingsReader

__all__ = [
    "BackgroundDispatcher",
    "log_error_sink",
    "DeliveryRecordStore",
    "DeliveryOrchestrator",
    "RecipientResolver",
    "RecipientSettingsReader",
    "STATUS_ROUTES",
    "TIMEOUT_ERROR",
    "QUEUE_TIMEOUT_ERROR",
]
