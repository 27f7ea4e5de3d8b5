"""Tests for the application lifespan."""
import asyncio

from files_manager.main import create_app


async def test_embedded_worker_is_stopped_on_shutdown(services, monkeypatch):
    started = asyncio.Event()
    stopped = []

    async def subscribe(handler, poll_interval, stale_minutes):
        started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            stopped.append(True)
            raise

    monkeypatch.setattr(services.queue, "subscribe", subscribe)
    settings = services.settings.model_copy(update={"RUN_EMBEDDED_WORKER": True})
    app = create_app(settings=settings, services=services)

    async with app.router.lifespan_context(app):
        await asyncio.wait_for(started.wait(), timeout=1)
        assert not stopped

    assert stopped == [True]


async def test_no_worker_unless_enabled(services, monkeypatch):
    calls = []

    async def subscribe(*args, **kwargs):
        calls.append(args)

    monkeypatch.setattr(services.queue, "subscribe", subscribe)
    app = create_app(services=services)

    async with app.router.lifespan_context(app):
        await asyncio.sleep(0)

    assert calls == []
