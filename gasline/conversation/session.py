"""
Per-conversation working memory and the registry that owns it.

A ``SessionContext`` holds what must survive between two messages of the
same customer but is not worth persisting: the order draft, the report
being filed and background notification jobs. ``SessionRegistry`` hands
out one context per phone under a per-phone ``asyncio.Lock``, so two
messages from the same customer are processed one after the other while
different customers proceed concurrently.

Usage:
    registry = SessionRegistry()
    async with registry.acquire("+5215512345678") as session:
        session.start_draft(customer_id=1, kind=ProductKind.TANK)
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Optional

from gasline.conversation.drafts import OrderDraft, ProductKind
from gasline.schemas.customer_schema import Customer

logger = logging.getLogger(__name__)


@dataclass
class ScheduledJob:
    name: str
    task: asyncio.Task
    bound_to_draft: bool


@dataclass
class SessionContext:
    """Typed scratch data for one phone."""
    phone: str
    customer: Optional[Customer] = None
    draft: Optional[OrderDraft] = None
    profile_update: bool = False
    seal_report_id: Optional[int] = None
    tracked_order_id: Optional[int] = None
    last_seen: float = field(default_factory=time.monotonic)
    jobs: list[ScheduledJob] = field(default_factory=list)

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    # ------------------------------------------------------------------ #
    # Draft lifecycle
    # ------------------------------------------------------------------ #

    def start_draft(self, customer_id: int, kind: ProductKind) -> OrderDraft:
        """Begin a new order, abandoning any previous unconfirmed one."""
        if self.draft is not None:
            self.discard_draft()
        self.draft = OrderDraft(customer_id=customer_id, kind=kind)
        return self.draft

    def discard_draft(self) -> None:
        """Drop the draft and cancel the jobs that only made sense for it."""
        self.draft = None
        self.cancel_jobs(draft_only=True)

    def commit_draft(self) -> None:
        """Forget the draft after it was stored; its jobs keep running."""
        self.draft = None
        for job in self.jobs:
            job.bound_to_draft = False

    # ------------------------------------------------------------------ #
    # Background jobs
    # ------------------------------------------------------------------ #

    def schedule(
        self,
        name: str,
        delay: float,
        action: Callable[[], Awaitable[None]],
        bound_to_draft: bool = True,
    ) -> asyncio.Task:
        """Run ``action`` after ``delay`` seconds unless cancelled first."""

        async def _run() -> None:
            await asyncio.sleep(delay)
            await action()

        task = asyncio.get_running_loop().create_task(_run(), name=f"{self.phone}:{name}")
        job = ScheduledJob(name=name, task=task, bound_to_draft=bound_to_draft)
        self.jobs.append(job)
        task.add_done_callback(lambda _t: self._forget(job))
        logger.debug("Scheduled %s for %s in %.1fs", name, self.phone, delay)
        return task

    def _forget(self, job: ScheduledJob) -> None:
        if job in self.jobs:
            self.jobs.remove(job)
        if not job.task.cancelled() and job.task.exception() is not None:
            logger.error(
                "Background job %s for %s failed: %s",
                job.name, self.phone, job.task.exception(),
            )

    def cancel_jobs(self, draft_only: bool = False) -> int:
        cancelled = 0
        for job in list(self.jobs):
            if draft_only and not job.bound_to_draft:
                continue
            if not job.task.done():
                job.task.cancel()
                cancelled += 1
            self.jobs.remove(job)
        if cancelled:
            logger.info("Cancelled %d pending job(s) for %s", cancelled, self.phone)
        return cancelled

    def pending_jobs(self) -> list[str]:
        return [job.name for job in self.jobs if not job.task.done()]

    def has_order_jobs(self) -> bool:
        """True while a job for an already stored order is still pending."""
        return any(not job.bound_to_draft and not job.task.done() for job in self.jobs)


class SessionRegistry:
    """Keyed store of session contexts with one lock per phone."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionContext] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def acquire(self, phone: str) -> AsyncIterator[SessionContext]:
        lock = self._locks.setdefault(phone, asyncio.Lock())
        async with lock:
            session = self._sessions.get(phone)
            if session is None:
                session = SessionContext(phone=phone)
                self._sessions[phone] = session
            session.touch()
            yield session

    def get(self, phone: str) -> Optional[SessionContext]:
        return self._sessions.get(phone)

    def __len__(self) -> int:
        return len(self._sessions)

    def evict_idle(self, max_idle_seconds: float) -> int:
        """Drop sessions idle longer than ``max_idle_seconds``.

        Sessions in use, or still waiting to notify about a stored order, are kept.
        """
        now = time.monotonic()
        evicted = 0
        for phone, session in list(self._sessions.items()):
            lock = self._locks.get(phone)
            if lock is not None and lock.locked():
                continue
            if session.has_order_jobs():
                continue
            if now - session.last_seen <= max_idle_seconds:
                continue
            session.discard_draft()
            session.cancel_jobs()
            del self._sessions[phone]
            self._locks.pop(phone, None)
            evicted += 1
        if evicted:
            logger.info("Evicted %d idle session(s)", evicted)
        return evicted

    def close(self) -> None:
        """Cancel every background job. Call on shutdown."""
        for session in self._sessions.values():
            session.cancel_jobs()
        self._sessions.clear()
        self._locks.clear()
