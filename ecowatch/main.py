"""
EcoWatch sync client: keeps sensor and report state fresh and logs every update
"""

import asyncio
import logging

from .api import ApiClient, AuthAPI, ReportAPI, SensorAPI
from .core.auth import TOKEN_KEY, AuthSession
from .core.channel import StateChannel, StateUpdate, UpdateKind
from .core.config import Settings, settings
from .core.monitors import ReportMonitor, SensorMonitor
from .core.reports import severity_counts
from .storage import initialize_storage

logger = logging.getLogger(__name__)


def log_update(channel: StateChannel, update: StateUpdate):
    """Default consumer: one log line per applied update"""
    if not update.ok:
        if channel.has_data:
            logger.warning(f"{update.kind.value} tick {update.tick} failed, keeping tick {channel.last_tick}: {update.error}")
        else:
            logger.warning(f"{update.kind.value} tick {update.tick} failed, no data yet: {update.error}")
        return

    if update.kind is UpdateKind.READINGS:
        summary = ", ".join(f"{v.id}={v.status.value}" for v in update.data)
        logger.info(f"Sensors (tick {update.tick}): {summary}")
    else:
        logger.info(f"Reports (tick {update.tick}): {severity_counts(update.data)}")


async def run(config: Settings = settings):
    store = initialize_storage(config.STORAGE_DIR, config.STORAGE_FILE)
    token_provider = lambda: store.get(TOKEN_KEY)

    async with ApiClient(config.API_BASE_URL, config.REQUEST_TIMEOUT_SECONDS, token_provider=token_provider) as client:
        auth = AuthSession(AuthAPI(client), store)
        if auth.token() is not None and auth.token_expired():
            logger.info("Stored token has expired, clearing credentials")
            auth.clear()

        sensor_api = SensorAPI(client, history_hours=config.HISTORY_HOURS)
        sensors = SensorMonitor(sensor_api, config.POLL_INTERVAL_MS, config.REQUEST_TIMEOUT_SECONDS)
        reports = ReportMonitor(ReportAPI(client), config.REPORT_POLL_INTERVAL_MS, config.REQUEST_TIMEOUT_SECONDS)
        for monitor in (sensors, reports):
            monitor.subscribe(log_update)
            monitor.start()

        try:
            await asyncio.Event().wait()
        finally:
            for monitor in (sensors, reports):
                monitor.stop()
            for monitor in (sensors, reports):
                await monitor.drain()
            logger.info("Monitors stopped")


def main():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info(f"Syncing from {settings.API_BASE_URL}")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
