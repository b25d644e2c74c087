"""Fan business events out to recipients over every delivery channel."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import (
    RELATED_ENTITY_PURCHASE_REQUEST,
    RELATED_ENTITY_USER,
    Channel,
    Correlation,
    DeliveryAttempt,
    DispatchReport,
    NotificationType,
    Recipient,
    RenderedMessage,
    Requester,
)
from app.domain.errors import (
    PermissionDenied,
    RecipientLookupError,
    TemplateError,
    ValidationFailure,
)
from app.domain.policy import channel_enabled, should_deliver
from app.domain.templates import (
    TEMPLATE_OVERDUE_REQUEST_WARNING,
    TEMPLATE_PURCHASE_REQUEST_CREATED,
    TEMPLATE_SYSTEM_MAINTENANCE_NOTICE,
    TEMPLATE_URGENT_REQUEST_ALERT,
    TemplateCatalog,
    default_catalog,
)
from app.infrastructure.channels import CHANNEL_ORDER, ChannelAdapter
from app.utils import now_in_app_timezone

from .delivery_records import DeliveryRecordStore
from .events import (
    STATUS_ROUTES,
    overdue_request_variables,
    request_created_variables,
    status_change_variables,
    system_message_variables,
    urgent_request_variables,
)
from .recipients import RecipientResolver, RecipientSettingsReader

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "TIMEOUT"
QUEUE_TIMEOUT_ERROR = "QUEUE_TIMEOUT"
RECORD_ERROR = "RECORD_ERROR"
SYSTEM_BROADCAST_ID = "broadcast"
STATUS_CHANGE_EVENT = "status_change"

# Free channels that urgent requests reach before the e-mail and paid gateways.
URGENT_FIRST_CHANNELS = frozenset({Channel.PUSH, Channel.CHAT_BOT})


@dataclass(frozen=True)
class _PlannedDelivery:
    recipient: Recipient
    adapter: ChannelAdapter


@dataclass
class _Submitted:
    attempt: DeliveryAttempt
    future: Future | None = None
    started_at: float | None = None


class DeliveryOrchestrator:
    """Resolve recipients, apply their policy and deliver on each channel.

    Every (recipient, channel) pair is independent: it gets its own pending
    :class:`DeliveryAttempt` and runs on the shared worker pool, so a failing
    or slow channel never affects another. Entry points never raise; problems
    are reported through the returned :class:`DispatchReport`.
    """

    def __init__(
        self,
        *,
        channels: Mapping[Channel, ChannelAdapter],
        resolver: RecipientResolver,
        settings_reader: RecipientSettingsReader,
        records: DeliveryRecordStore,
        catalog: TemplateCatalog = default_catalog,
        base_url: str = "http://localhost:3000",
        max_workers: int = 8,
        timeout_seconds: float = 30.0,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._channels = dict(channels)
        self._resolver = resolver
        self._settings_reader = settings_reader
        self._records = records
        self._catalog = catalog
        self._base_url = base_url
        self._timeout = timeout_seconds
        self._max_workers = max_workers
        self._clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify-delivery"
        )

    @property
    def channels(self) -> Mapping[Channel, ChannelAdapter]:
        return self._channels

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "DeliveryOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def notify_request_created(
        self,
        request_id: str,
        requester: Requester,
        part_name: str,
        importance: str,
    ) -> DispatchReport:
        variables = request_created_variables(
            base_url=self._base_url,
            request_id=request_id,
            requester_name=requester.display_name,
            part_name=part_name,
            importance=importance,
            now=self._clock(),
        )
        return self._dispatch(
            NotificationType.PURCHASE_REQUEST_CREATED,
            TEMPLATE_PURCHASE_REQUEST_CREATED,
            variables,
            Correlation(RELATED_ENTITY_PURCHASE_REQUEST, request_id, requester.id),
        )

    def notify_urgent_request(
        self,
        request_id: str,
        requester: Requester,
        requester_phone: str,
        part_name: str,
        urgent_reason: str,
    ) -> DispatchReport:
        """Alert everyone about an urgent request, ignoring quiet hours and filters."""

        variables = urgent_request_variables(
            base_url=self._base_url,
            request_id=request_id,
            requester_name=requester.display_name,
            requester_phone=requester_phone,
            part_name=part_name,
            urgent_reason=urgent_reason,
            now=self._clock(),
        )
        return self._dispatch(
            NotificationType.URGENT_REQUEST,
            TEMPLATE_URGENT_REQUEST_ALERT,
            variables,
            Correlation(RELATED_ENTITY_PURCHASE_REQUEST, request_id, requester.id),
            urgent=True,
        )

    def notify_status_change(
        self,
        request_id: str,
        new_status: str,
        part_name: str,
        requester_name: str | None = None,
        *,
        quantity: int | str | None = None,
        branch_name: str | None = None,
        expected_date: datetime | str | None = None,
        target_role: str | None = None,
    ) -> DispatchReport:
        route = STATUS_ROUTES.get(new_status)
        if route is None:
            logger.warning("No notification is defined for status %r", new_status)
            return DispatchReport(
                event_type=STATUS_CHANGE_EVENT,
                template_id=None,
                aborted=True,
                error=f"No notification is defined for status '{new_status}'",
            )

        variables = status_change_variables(
            base_url=self._base_url,
            request_id=request_id,
            new_status=new_status,
            part_name=part_name,
            now=self._clock(),
            requester_name=requester_name,
            quantity=quantity,
            branch_name=branch_name,
            expected_date=expected_date,
        )
        return self._dispatch(
            route.event_type,
            route.template_id,
            variables,
            Correlation(RELATED_ENTITY_PURCHASE_REQUEST, request_id),
            target_role=target_role,
        )

    def notify_overdue_request(
        self,
        request_id: str,
        part_name: str,
        request_date: datetime,
        overdue_days: int,
        current_status: str,
        *,
        target_role: str | None = None,
    ) -> DispatchReport:
        variables = overdue_request_variables(
            base_url=self._base_url,
            request_id=request_id,
            part_name=part_name,
            request_date=request_date,
            overdue_days=overdue_days,
            current_status=current_status,
            now=self._clock(),
        )
        return self._dispatch(
            NotificationType.OVERDUE_REQUEST,
            TEMPLATE_OVERDUE_REQUEST_WARNING,
            variables,
            Correlation(RELATED_ENTITY_PURCHASE_REQUEST, request_id),
            target_role=target_role,
        )

    def notify_system_message(
        self, title: str, message: str, level: str = "info"
    ) -> DispatchReport:
        variables = system_message_variables(
            title=title, message=message, level=level, now=self._clock()
        )
        return self._dispatch(
            NotificationType.SYSTEM_MAINTENANCE,
            TEMPLATE_SYSTEM_MAINTENANCE_NOTICE,
            variables,
            Correlation(RELATED_ENTITY_USER, SYSTEM_BROADCAST_ID),
        )

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------
    def _dispatch(
        self,
        event_type: NotificationType,
        template_id: str,
        variables: Mapping[str, str],
        correlation: Correlation,
        *,
        target_role: str | None = None,
        urgent: bool = False,
    ) -> DispatchReport:
        report = DispatchReport(event_type=event_type.value, template_id=template_id)
        try:
            self._run(report, template_id, variables, correlation, target_role, urgent)
        except Exception as exc:  # noqa: BLE001 - entry points report, never raise
            logger.exception("Dispatch of %s failed", event_type.value)
            report.aborted = True
            report.error = str(exc) or type(exc).__name__
        return report

    def _run(
        self,
        report: DispatchReport,
        template_id: str,
        variables: Mapping[str, str],
        correlation: Correlation,
        target_role: str | None,
        urgent: bool,
    ) -> None:
        try:
            template = self._catalog.get(template_id)
            message = self._catalog.render(template_id, variables)
        except TemplateError as exc:
            logger.error("Cannot render %s notification: %s", report.event_type, exc)
            report.aborted = True
            report.error = str(exc)
            return

        try:
            recipients = self._resolver.resolve_by_role(target_role or template.target_role)
        except RecipientLookupError as exc:
            logger.error("Cannot resolve recipients for %s: %s", report.event_type, exc)
            report.aborted = True
            report.error = str(exc)
            return

        plan = self._plan(report, recipients, message, correlation, urgent)
        submitted = self._submit(plan, message, correlation)
        for attempt in self._collect(submitted):
            report.record_attempt(attempt)

        logger.info(
            "Dispatched %s to %d of %d recipient(s): %s",
            report.event_type,
            report.recipients_considered - report.recipients_skipped,
            report.recipients_considered,
            ", ".join(
                f"{name}={summary.sent}/{summary.attempted}"
                for name, summary in report.channels.items()
            ),
        )

    def _plan(
        self,
        report: DispatchReport,
        recipients: Sequence[Recipient],
        message: RenderedMessage,
        correlation: Correlation,
        urgent: bool,
    ) -> list[_PlannedDelivery]:
        """Return the deliveries to attempt, urgent free channels first."""

        now = self._clock()
        first: list[_PlannedDelivery] = []
        rest: list[_PlannedDelivery] = []

        for recipient in recipients:
            report.recipients_considered += 1
            settings = self._settings_reader.get(recipient.id)

            if not urgent and not should_deliver(
                recipient,
                settings,
                message.event_type,
                correlation.triggering_user_id,
                now=now,
            ):
                report.recipients_skipped += 1
                logger.debug("Policy holds %s back from %s", message.event_type.value, recipient.id)
                continue

            for channel in CHANNEL_ORDER:
                adapter = self._channels.get(channel)
                if adapter is None:
                    continue

                forced = urgent and channel in URGENT_FIRST_CHANNELS
                if not forced and not channel_enabled(settings, channel):
                    report.record_skip(channel)
                    continue

                if not self._ready(adapter, recipient):
                    report.record_skip(channel)
                    continue

                (first if forced else rest).append(_PlannedDelivery(recipient, adapter))

        return first + rest

    @staticmethod
    def _ready(adapter: ChannelAdapter, recipient: Recipient) -> bool:
        try:
            adapter.ensure_ready(recipient)
        except (ValidationFailure, PermissionDenied) as exc:
            logger.debug("Skipping %s for %s: %s", adapter.label, recipient.id, exc)
            return False
        except Exception:  # noqa: BLE001
            logger.exception("Readiness check of %s failed for %s", adapter.label, recipient.id)
            return False
        return True

    def _submit(
        self,
        plan: Sequence[_PlannedDelivery],
        message: RenderedMessage,
        correlation: Correlation,
    ) -> list[_Submitted]:
        submitted: list[_Submitted] = []
        for planned in plan:
            try:
                attempt = self._records.create_pending(
                    channel=planned.adapter.channel,
                    recipient=planned.recipient,
                    contact=planned.adapter.contact_for(planned.recipient),
                    message=message,
                    correlation=correlation,
                )
            except SQLAlchemyError:
                logger.exception(
                    "Could not record %s delivery for %s; not sending",
                    planned.adapter.label,
                    planned.recipient.id,
                )
                continue

            item = _Submitted(attempt)
            item.future = self._executor.submit(
                self._deliver, planned.adapter, planned.recipient, message, correlation, item
            )
            submitted.append(item)
        return submitted

    def _deliver(
        self,
        adapter: ChannelAdapter,
        recipient: Recipient,
        message: RenderedMessage,
        correlation: Correlation,
        item: _Submitted,
    ) -> None:
        item.started_at = time.monotonic()
        outcome = adapter.send(recipient, message, correlation)
        if not self._records.complete(item.attempt.id, outcome):
            logger.warning(
                "%s delivery %s finished after it was already closed", adapter.label, item.attempt.id
            )

    def _collect(self, submitted: Sequence[_Submitted]) -> list[DeliveryAttempt]:
        """Wait for every delivery, closing the ones that overrun their deadline.

        A running delivery gets ``timeout_seconds`` from the moment it starts.
        Deliveries still queued when every batch of workers could have used its
        full timeout are cancelled with :data:`QUEUE_TIMEOUT_ERROR`.
        """

        if not submitted:
            return []

        pending = {item.future: item for item in submitted}
        batches = math.ceil(len(submitted) / self._max_workers)
        queue_deadline = time.monotonic() + self._timeout * batches

        while pending:
            now = time.monotonic()
            next_deadline = min(
                [queue_deadline, now + self._timeout]
                + [
                    item.started_at + self._timeout
                    for item in pending.values()
                    if item.started_at is not None
                ]
            )
            done, _ = wait(
                list(pending), timeout=max(0.0, next_deadline - now), return_when=FIRST_COMPLETED
            )
            for future in done:
                item = pending.pop(future)
                error = future.exception()
                if error is not None:
                    logger.error("Recording delivery %s failed: %s", item.attempt.id, error)
                    self._fail(item.attempt, RECORD_ERROR, str(error))

            now = time.monotonic()
            for future, item in list(pending.items()):
                if item.started_at is None and now >= queue_deadline:
                    if future.cancel():
                        del pending[future]
                        self._fail(
                            item.attempt,
                            QUEUE_TIMEOUT_ERROR,
                            "Not started before the dispatch deadline",
                        )
                        continue
                    # Already picked up by a worker that has not stamped it yet.
                    item.started_at = now
                if item.started_at is not None and now - item.started_at >= self._timeout:
                    del pending[future]
                    self._fail(
                        item.attempt,
                        TIMEOUT_ERROR,
                        f"No result within {self._timeout:g} seconds",
                    )

        return [self._reload(item.attempt) for item in submitted]

    def _fail(self, attempt: DeliveryAttempt, error_code: str, error_message: str) -> None:
        try:
            self._records.fail_pending(attempt.id, error_code, error_message)
        except SQLAlchemyError:
            logger.exception("Could not close delivery %s as %s", attempt.id, error_code)

    def _reload(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        try:
            return self._records.get(attempt.id) or attempt
        except SQLAlchemyError:
            logger.exception("Could not reload delivery %s", attempt.id)
            return attempt


__all__ = [
    "DeliveryOrchestrator",
    "TIMEOUT_ERROR",
    "QUEUE_TIMEOUT_ERROR",
    "RECORD_ERROR",
    "URGENT_FIRST_CHANNELS",
]
