"""Autosave coordinator for an open design.

Turns a bursty stream of "document changed" notifications into a debounced,
single-flight sequence of saves:

- every change (re)starts one debounce timer;
- when the timer fires, a save starts unless one is already in flight, in
  which case a pending flag is set;
- when a save finishes (either way) and the pending flag is set, another
  save starts immediately with the document as it is at that moment;
- failures are never retried automatically, the next edit or a manual
  ``save_now`` triggers the next attempt.

The state machine itself (``transition``) is a pure function so it can be
exercised without timers or I/O. ``AutosaveCoordinator`` wires it to a
scheduler, the editor and a persist callable.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Awaitable, Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from draftbox.core.config import settings
from draftbox.core.exceptions import SaveFailedError
from draftbox.core.logging import get_logger
from draftbox.services.design import DesignService
from draftbox.utils.ids import utcnow

logger = get_logger(__name__)

PersistFn = Callable[[Any], Awaitable[None]]
StatusListener = Callable[["SaveStatus", "datetime | None"], None]


class SaveStatus(str, enum.Enum):
    """Observable autosave status."""

    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class SaveEvent(str, enum.Enum):
    """Inputs to the autosave state machine."""

    REQUESTED = "requested"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SaveAction(str, enum.Enum):
    """What the coordinator must do after a transition."""

    NONE = "none"
    START_SAVE = "start_save"
    REQUEST_AGAIN = "request_again"


@dataclass(frozen=True)
class SaveState:
    """Status plus the in-flight and pending flags."""

    status: SaveStatus = SaveStatus.IDLE
    in_flight: bool = False
    pending: bool = False


def transition(state: SaveState, event: SaveEvent) -> tuple[SaveState, SaveAction]:
    """Apply one event to the autosave state machine.

    Args:
        state: Current state.
        event: The event that happened.

    Returns:
        Tuple of (new state, action for the caller to perform).
    """
    if event is SaveEvent.REQUESTED:
        if state.in_flight:
            return replace(state, pending=True), SaveAction.NONE
        return SaveState(status=SaveStatus.SAVING, in_flight=True), SaveAction.START_SAVE

    status = SaveStatus.SAVED if event is SaveEvent.SUCCEEDED else SaveStatus.ERROR
    action = SaveAction.REQUEST_AGAIN if state.pending else SaveAction.NONE
    return SaveState(status=status), action


class DocumentEditor(Protocol):
    """The external editor holding the live document."""

    async def serialize_document(self) -> Any:
        """Return the current document in serialized form."""
        ...

    def add_change_listener(self, handler: Callable[[], None]) -> None:
        """Register a handler called on every document change."""
        ...

    def remove_change_listener(self, handler: Callable[[], None]) -> None:
        """Deregister a handler added with add_change_listener."""
        ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class AutosaveCoordinator:
    """Debounced, single-flight autosave for one open document.

    One coordinator exists per open document; coordinators for different
    documents share nothing.

    Usage:
        coordinator = AutosaveCoordinator(editor, design_persister(design_id))
        coordinator.attach()
        ...
        coordinator.close()
    """

    def __init__(
        self,
        editor: DocumentEditor,
        persist: PersistFn,
        delay: float | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the coordinator.

        Args:
            editor: Editor exposing serialize_document and change listeners.
            persist: Coroutine function storing a serialized document.
            delay: Debounce delay in seconds (default from settings).
            scheduler: Timer source (default: the running event loop).
            clock: Source of save timestamps.
        """
        self._editor = editor
        self._persist = persist
        self.delay = settings.autosave_delay_seconds if delay is None else delay
        self._scheduler = scheduler or LoopScheduler()
        self._clock = clock

        self._state = SaveState()
        self._timer: TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[StatusListener] = []
        self._attached = False
        self._enabled = True

        self.last_saved_at: datetime | None = None
        self.last_error: SaveFailedError | None = None

    # -- Observable state ---------------------------------------------------

    @property
    def status(self) -> SaveStatus:
        return self._state.status

    @property
    def state(self) -> SaveState:
        return self._state

    @property
    def save_in_flight(self) -> bool:
        return self._state.in_flight

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def add_listener(self, listener: StatusListener) -> None:
        """Register a callback receiving (status, last_saved_at) on every status change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        self._listeners.remove(listener)

    # -- Lifecycle ----------------------------------------------------------

    def attach(self) -> None:
        """Subscribe to the editor's change notifications (once)."""
        if self._attached:
            return
        self._editor.add_change_listener(self.notify_change)
        self._attached = True
        logger.debug("autosave_attached")

    def close(self) -> None:
        """Unsubscribe and stop scheduling. An in-flight save still completes."""
        if self._attached:
            self._editor.remove_change_listener(self.notify_change)
            self._attached = False
        self.disable()
        logger.debug("autosave_closed")

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        """Cancel any pending timer and stop scheduling new ones."""
        self._enabled = False
        self._cancel_timer()

    # -- Triggers -----------------------------------------------------------

    def notify_change(self) -> None:
        """Handle one document-changed notification by restarting the debounce timer."""
        if not self._enabled:
            return
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self.delay, self._on_timer)

    def save_now(self) -> None:
        """Save immediately, skipping the debounce delay.

        Still single-flight: during an in-flight save this only marks a
        follow-up save as pending.
        """
        self._cancel_timer()
        self._dispatch(SaveEvent.REQUESTED)

    async def wait_idle(self) -> None:
        """Wait until no save is in flight, including follow-up saves."""
        while self._task is not None and not self._task.done():
            await self._task

    # -- Internals ----------------------------------------------------------

    def _on_timer(self) -> None:
        self._timer = None
        self._dispatch(SaveEvent.REQUESTED)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _dispatch(self, event: SaveEvent) -> None:
        previous = self._state
        self._state, action = transition(previous, event)

        logger.debug(
            "autosave_transition",
            save_event=event.value,
            status=self._state.status.value,
            in_flight=self._state.in_flight,
            pending=self._state.pending,
        )

        if self._state.status is not previous.status or event is not SaveEvent.REQUESTED:
            self._notify_listeners()

        if action is SaveAction.START_SAVE:
            self._task = asyncio.get_running_loop().create_task(self._run_save())
        elif action is SaveAction.REQUEST_AGAIN:
            self._dispatch(SaveEvent.REQUESTED)

    async def _run_save(self) -> None:
        try:
            document = await self._editor.serialize_document()
            await self._persist(document)
        except Exception as e:
            self.last_error = SaveFailedError(f"Autosave failed: {e}")
            logger.warning("autosave_failed", error=str(e), error_type=type(e).__name__)
            self._dispatch(SaveEvent.FAILED)
        else:
            self.last_saved_at = self._clock()
            self.last_error = None
            logger.debug("autosave_succeeded", saved_at=self.last_saved_at.isoformat())
            self._dispatch(SaveEvent.SUCCEEDED)

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state.status, self.last_saved_at)
            except Exception:
                logger.exception("autosave_listener_error")


def design_persister(
    design_id: str,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> PersistFn:
    """Build a persist callable that stores documents for one design.

    Each call opens its own session, updates only the ``document`` field
    through DesignService.update_design and commits.
    """
    if session_maker is None:
        # Deferred so importing this module does not create the engine
        from draftbox.db.session import async_session_maker

        session_maker = async_session_maker

    async def persist(document: Any) -> None:
        async with session_maker() as session:
            try:
                await DesignService(session).update_design(design_id, document=document)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return persist
