"""Database-backed thumbnail job queue.

Jobs are rows in the jobs table. Delivery is at-least-once:
- claim() flips one 'queued' row to 'running' with a conditional UPDATE,
  so competing workers never own the same job at the same time.
- A failed job goes back to 'queued' until it runs out of attempts.
- Jobs left 'running' by a crashed worker are requeued by requeue_stale(),
  or failed once they are out of attempts.

For the current scale polling is enough; swap for a broker if it is not.
"""
import asyncio
import logging
import time
import traceback
import uuid
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from files_manager.models.job import THUMBNAIL_JOB_TYPE, Job
from files_manager.types import ThumbnailJob

logger = logging.getLogger(__name__)

JobHandler = Callable[[dict], Awaitable[None]]

_MAX_ERROR_LENGTH = 2000
_STALE_CHECK_INTERVAL = 60.0  # seconds between stale-job sweeps in subscribe()


def safe_error_message(e: Exception, fallback: str = "Job failed") -> str:
    """Extract a meaningful error message from an exception.

    Some exceptions produce an empty str(e). This helper falls back to the
    exception class name.
    """
    msg = str(e).strip()
    if not msg:
        msg = f"{type(e).__name__}: {fallback}"
    return msg[:_MAX_ERROR_LENGTH]


class ThumbnailQueue:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: int = 3,
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts

    async def publish(self, job: ThumbnailJob) -> uuid.UUID:
        async with self.session_factory() as db:
            row = Job(job_type=THUMBNAIL_JOB_TYPE, params=job.to_params())
            db.add(row)
            await db.commit()
            logger.info(f"Queued thumbnail job {row.id} for file {job.file_id}")
            return row.id

    async def claim(self) -> Optional[Job]:
        """Take ownership of the oldest queued job, or return None."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(Job.id)
                .where(Job.status == "queued", Job.job_type == THUMBNAIL_JOB_TYPE)
                .order_by(Job.created_at)
                .limit(1)
            )
            job_id = result.scalar_one_or_none()
            if job_id is None:
                return None

            claimed = await db.execute(
                update(Job)
                .where(Job.id == job_id, Job.status == "queued")
                .values(
                    status="running",
                    attempts=Job.attempts + 1,
                    started_at=datetime.now(timezone.utc),
                )
            )
            await db.commit()
            if claimed.rowcount != 1:
                # Another worker got there first
                return None
            return await db.get(Job, job_id)

    async def ack(self, job_id: uuid.UUID) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(Job)
                .where(Job.id == job_id)
                .values(
                    status="completed",
                    error_message=None,
                    completed_at=datetime.now(timezone.utc),
                )
            )
            await db.commit()

    async def nack(self, job_id: uuid.UUID, error: Exception) -> str:
        """Report a failed attempt. Returns the job's new status."""
        async with self.session_factory() as db:
            job = await db.get(Job, job_id)
            if job is None:
                return "missing"
            job.error_message = safe_error_message(error)
            if job.attempts < self.max_attempts:
                job.status = "queued"
                job.started_at = None
            else:
                job.status = "failed"
                job.completed_at = datetime.now(timezone.utc)
            await db.commit()
            return job.status

    async def requeue_stale(self, stale_minutes: int = 15) -> int:
        """Return jobs stuck in 'running' for longer than `stale_minutes` to the queue.

        Covers workers that crashed or were killed mid-job. A job that has
        already used all its attempts is failed instead, so one that keeps
        taking the worker down is not redelivered forever.
        """
        now = datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=stale_minutes)
        stale = and_(Job.status == "running", Job.started_at < cutoff)
        async with self.session_factory() as db:
            exhausted = await db.execute(
                update(Job)
                .where(stale, Job.attempts >= self.max_attempts)
                .values(
                    status="failed",
                    error_message="Worker stopped mid-job",
                    completed_at=now,
                )
            )
            requeued = await db.execute(
                update(Job)
                .where(stale)
                .values(status="queued", started_at=None)
            )
            await db.commit()
        if exhausted.rowcount:
            logger.warning(f"Failed {exhausted.rowcount} stale thumbnail job(s) out of attempts")
        if requeued.rowcount:
            logger.warning(f"Requeued {requeued.rowcount} stale thumbnail job(s)")
        return requeued.rowcount

    async def get(self, job_id: uuid.UUID) -> Optional[Job]:
        async with self.session_factory() as db:
            return await db.get(Job, job_id)

    async def process_next(self, handler: JobHandler) -> bool:
        """Claim one job and run `handler` on its payload.

        Returns False when the queue was empty.
        """
        job = await self.claim()
        if job is None:
            return False

        logger.info(f"Processing job {job.id} (attempt {job.attempts}/{self.max_attempts})")
        try:
            await handler(dict(job.params or {}))
        except Exception as e:
            logger.error(f"Job {job.id} failed: {e}")
            logger.error(traceback.format_exc())
            status = await self.nack(job.id, e)
            logger.info(f"Job {job.id} is now {status}")
        else:
            await self.ack(job.id)
            logger.info(f"Job {job.id} completed")
        return True

    async def subscribe(
        self,
        handler: JobHandler,
        poll_interval: float = 2.0,
        stale_minutes: int = 15,
    ) -> None:
        """Main worker loop. Runs until cancelled."""
        logger.info("Thumbnail worker started")
        last_stale_check = 0.0
        while True:
            processed = False
            try:
                now = time.monotonic()
                if now - last_stale_check >= _STALE_CHECK_INTERVAL:
                    last_stale_check = now
                    await self.requeue_stale(stale_minutes)
                processed = await self.process_next(handler)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Worker loop error: {e}")

            if not processed:
                await asyncio.sleep(poll_interval)
