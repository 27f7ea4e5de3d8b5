"""Tests for the database-backed job queue."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from files_manager.exceptions import JobError
from files_manager.models import Job
from files_manager.services.thumbnail_queue import ThumbnailQueue, safe_error_message
from files_manager.types import ThumbnailJob


@pytest.fixture
def queue(session_factory):
    return ThumbnailQueue(session_factory, max_attempts=2)


def _job():
    return ThumbnailJob(file_id=uuid.uuid4(), owner_id=uuid.uuid4())


async def test_claim_is_exclusive(queue):
    job_id = await queue.publish(_job())

    claimed = await queue.claim()

    assert claimed.id == job_id
    assert claimed.status == "running"
    assert claimed.attempts == 1
    assert claimed.started_at is not None
    assert await queue.claim() is None


async def test_claims_oldest_first(queue):
    first = await queue.publish(_job())
    second = await queue.publish(_job())

    assert (await queue.claim()).id == first
    assert (await queue.claim()).id == second


async def test_ack_completes(queue):
    job_id = await queue.publish(_job())
    await queue.claim()

    await queue.ack(job_id)

    job = await queue.get(job_id)
    assert job.status == "completed"
    assert job.completed_at is not None


async def test_nack_retries_then_fails(queue):
    job_id = await queue.publish(_job())

    await queue.claim()
    assert await queue.nack(job_id, JobError("File not found")) == "queued"

    await queue.claim()
    assert await queue.nack(job_id, JobError("File not found")) == "failed"

    job = await queue.get(job_id)
    assert job.attempts == 2
    assert job.error_message == "File not found"
    assert await queue.claim() is None


async def _backdate(session_factory, job_id, minutes=30):
    async with session_factory() as db:
        await db.execute(
            update(Job)
            .where(Job.id == job_id)
            .values(started_at=datetime.now(timezone.utc) - timedelta(minutes=minutes))
        )
        await db.commit()


async def test_requeue_stale(queue, session_factory):
    job_id = await queue.publish(_job())
    await queue.claim()
    await _backdate(session_factory, job_id)

    assert await queue.requeue_stale(stale_minutes=15) == 1
    assert (await queue.get(job_id)).status == "queued"


async def test_requeue_stale_fails_job_out_of_attempts(session_factory):
    queue = ThumbnailQueue(session_factory, max_attempts=3)
    job_id = await queue.publish(_job())

    for attempt in range(1, 4):
        claimed = await queue.claim()
        assert claimed.id == job_id
        assert claimed.attempts == attempt
        await _backdate(session_factory, job_id)
        await queue.requeue_stale(stale_minutes=15)

    job = await queue.get(job_id)
    assert job.status == "failed"
    assert job.error_message == "Worker stopped mid-job"
    assert job.attempts == 3
    assert job.completed_at is not None
    assert await queue.claim() is None
    assert await queue.requeue_stale(stale_minutes=15) == 0


async def test_requeue_leaves_fresh_jobs(queue):
    job_id = await queue.publish(_job())
    await queue.claim()

    assert await queue.requeue_stale(stale_minutes=15) == 0
    assert (await queue.get(job_id)).status == "running"


async def test_process_next_empty(queue):
    async def handler(params):
        raise AssertionError("should not run")

    assert await queue.process_next(handler) is False


async def test_process_next_success(queue):
    job = _job()
    job_id = await queue.publish(job)
    seen = []

    async def handler(params):
        seen.append(params)

    assert await queue.process_next(handler) is True
    assert seen == [job.to_params()]
    assert (await queue.get(job_id)).status == "completed"


async def test_process_next_failure_is_reported(queue):
    job_id = await queue.publish(_job())

    async def handler(params):
        raise JobError("Thumbnail generation failed for widths 250")

    assert await queue.process_next(handler) is True

    job = await queue.get(job_id)
    assert job.status == "queued"
    assert job.error_message == "Thumbnail generation failed for widths 250"


def test_safe_error_message_falls_back_to_class_name():
    assert safe_error_message(RuntimeError()) == "RuntimeError: Job failed"
    assert len(safe_error_message(ValueError("x" * 5000))) == 2000
