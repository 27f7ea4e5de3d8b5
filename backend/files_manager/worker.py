"""Standalone thumbnail worker process.

Run one or more of these next to the API; they compete for jobs on the
shared queue table.
"""
import asyncio
import logging

from files_manager.config import Settings, settings as default_settings
from files_manager.container import build_services
from files_manager.main import configure_logging

logger = logging.getLogger(__name__)


async def run_worker(settings: Settings) -> None:
    # The worker never resolves session tokens, so Redis stays disconnected
    services = await build_services(settings, connect_sessions=False)
    try:
        await services.queue.requeue_stale(settings.WORKER_STALE_MINUTES)
        await services.queue.subscribe(
            services.worker.handle,
            poll_interval=settings.WORKER_POLL_INTERVAL,
            stale_minutes=settings.WORKER_STALE_MINUTES,
        )
    finally:
        await services.close()
        logger.info("Thumbnail worker stopped")


def main() -> None:
    configure_logging(default_settings.LOG_LEVEL)
    try:
        asyncio.run(run_worker(default_settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
