import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)

POLL_JOB_ID = 'poll_rss_feeds'


def create_scheduler(fetcher, interval_minutes=5, scheduler=None):
    """Schedule the feed polling job: once right away, then every ``interval_minutes``."""
    scheduler = scheduler or BackgroundScheduler()
    scheduler.add_job(
        fetcher.run_fetcher,
        'interval',
        minutes=interval_minutes,
        id=POLL_JOB_ID,
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info(f"Scheduled RSS polling every {interval_minutes} minutes")
    return scheduler
