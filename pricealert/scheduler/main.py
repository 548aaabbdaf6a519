"""Standalone monitor process with a popular-quotes refresh schedule."""
import logging
import asyncio
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pricealert.core.config import settings
from pricealert.core.exceptions import StoreError
from pricealert.container import Container, build_container

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class MonitorScheduler:
    """Runs the alert monitor plus periodic refresh of popular quotes."""

    def __init__(self, container: Container = None):
        logger.info("Initializing MonitorScheduler...")
        self.container = container
        self.scheduler = AsyncIOScheduler()
        logger.info("MonitorScheduler initialized")

    async def refresh_popular_quotes(self) -> int:
        """
        Fetch quotes for the popular symbols and store them as last-known prices.

        Returns:
            Number of quotes stored
        """
        try:
            quotes = await self.container.provider.fetch_popular()
        except Exception as e:
            logger.error(f"Error fetching popular quotes: {e}", exc_info=True)
            return 0

        stored = 0
        for symbol, quote in quotes.items():
            try:
                await self.container.store.put_quote(quote)
                stored += 1
            except StoreError as e:
                logger.warning(f"Could not store quote for {symbol}: {e}")

        logger.info(f"Refreshed {stored}/{len(self.container.provider.popular_symbols)} popular quotes")
        return stored

    async def start(self):
        """Start the monitor and the refresh job."""
        logger.info("=" * 60)
        logger.info("Starting monitor scheduler...")
        logger.info(f"Log level: {settings.log_level}")
        logger.info(f"Store backend: {settings.store_backend}")
        logger.info(f"Popular quotes refresh: every {settings.popular_refresh_minutes} minutes")
        logger.info("=" * 60)

        if self.container is None:
            if settings.store_backend == "sql":
                from pricealert.core.database import init_db
                await init_db()
            self.container = build_container()

        self.container.monitor.start()

        self.scheduler.add_job(
            self.refresh_popular_quotes,
            trigger=IntervalTrigger(minutes=settings.popular_refresh_minutes),
            id="refresh_popular_quotes",
            replace_existing=True
        )

        self.scheduler.start()
        logger.info("Scheduler started successfully")

    async def shutdown(self):
        """Stop scheduled jobs, then the monitor and its resources."""
        logger.info("Shutting down scheduler...")
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        if self.container is not None:
            await self.container.close()

    async def run(self):
        """Run scheduler indefinitely."""
        await self.start()

        try:
            # Keep running
            while True:
                await asyncio.sleep(1)
        except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
            pass
        finally:
            await self.shutdown()


async def main():
    """Main entry point for scheduler."""
    scheduler = MonitorScheduler()
    await scheduler.run()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
