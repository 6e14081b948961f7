from apscheduler.schedulers.asyncio import AsyncIOScheduler

from inventory_api.core.db import Database
from inventory_api.services.auth.auth_service import purge_expired_refresh_tokens


def build_scheduler(database: Database) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")

    @scheduler.scheduled_job("interval", hours=1, id="purge_expired_refresh_tokens")
    async def purge_refresh_tokens_job():
        await purge_expired_refresh_tokens(database)

    return scheduler
