from newspulse import create_app
from newspulse.tasks.scheduler import create_scheduler
from config import get_config
import atexit

config = get_config()

app = create_app(config)

# Scheduler setup: first RSS fetch immediately, then on the polling interval
services = app.extensions['newspulse']
scheduler = create_scheduler(services['feed_fetcher'], interval_minutes=config.POLL_INTERVAL_MINUTES)
services['scheduler'] = scheduler
scheduler.start()
atexit.register(lambda: scheduler.shutdown(wait=False))

if __name__ == '__main__':
    # the reloader would import this module twice and start a second scheduler
    app.run(host='0.0.0.0', port=config.PORT, threaded=True, use_reloader=False)
