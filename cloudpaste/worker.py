"""Long-running event workers

Usage:
    cloudpaste-worker cleanup      # ledger events, burn deletions and periodic sweeps
    cloudpaste-worker analytics    # view counting

Each worker loads its configuration section ('cleanup_worker' or
'analytics_worker' by default) and consumes its durable queue until SIGINT or
SIGTERM. On shutdown the consumer stops pulling new messages, the message in
flight is acked or nacked, scheduled sweeps are waited for and queued burn
deletions are drained.
"""

import argparse
import logging
import signal
import threading
from datetime import datetime, UTC

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from cloudpaste.constants import Defaults
from cloudpaste.services import CleanupService, ViewRecorder
from cloudpaste.services.factory import build_cleanup_service, build_consumer, build_view_recorder
from cloudpaste.types import ServiceConfig
from cloudpaste.utils import initialize_logging, load_config


logger = logging.getLogger(__name__)


def run_sweep_job(service: CleanupService) -> None:
    """Scheduled sweep; failures are logged and retried on the next tick"""
    try:
        service.run_sweep()
    except Exception:
        logger.exception('Scheduled sweep failed.')


def create_scheduler(service: CleanupService, interval_seconds: int) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=UTC)
    scheduler.add_job(
        run_sweep_job,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[service],
        id='cleanup_sweep',
        name='Sweep expired pastes',
        # One sweep at a time; missed ticks collapse into one run
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(UTC),
        replace_existing=True,
    )
    return scheduler


def run_cleanup_worker(config: ServiceConfig, stop_event: threading.Event, consumer_name: str | None = None) -> None:
    service = build_cleanup_service(config)
    consumer = build_consumer(config, Defaults.CLEANUP_GROUP, CleanupService.bindings)
    if consumer_name:
        consumer.consumer_name = consumer_name

    interval = int(config.get('sweep', {}).get('interval_seconds', Defaults.SWEEP_INTERVAL_SECONDS))
    scheduler = create_scheduler(service, interval)
    scheduler.start()
    logger.info('Scheduled sweeps.', extra={'intervalSeconds': interval})

    try:
        consumer.consume(service.handle_event, stop_event)
    finally:
        scheduler.shutdown(wait=True)
        service.close()
        logger.info('Cleanup worker stopped.')


def run_analytics_worker(config: ServiceConfig, stop_event: threading.Event, consumer_name: str | None = None) -> None:
    recorder = build_view_recorder(config)
    consumer = build_consumer(config, Defaults.ANALYTICS_GROUP, ViewRecorder.bindings)
    if consumer_name:
        consumer.consumer_name = consumer_name

    consumer.consume(recorder.handle_event, stop_event)
    logger.info('Analytics worker stopped.')


WORKERS = {
    'cleanup': ('cleanup_worker', run_cleanup_worker),
    'analytics': ('analytics_worker', run_analytics_worker),
}


def install_signal_handlers(stop_event: threading.Event) -> None:
    def _stop(signum, frame):
        logger.info('Received shutdown signal.', extra={'signal': signal.Signals(signum).name})
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog='cloudpaste-worker',
        description='Run a cloudpaste event worker until SIGINT/SIGTERM',
    )
    parser.add_argument(
        'worker',
        choices=sorted(WORKERS),
        help='Worker to run',
    )
    parser.add_argument(
        '--config-section',
        default=None,
        help="Configuration section to load (default: '<worker>_worker')",
    )
    parser.add_argument(
        '--consumer-name',
        default=None,
        help='Consumer name inside the consumer group (default: hostname)',
    )
    args = parser.parse_args(argv)

    initialize_logging()

    default_section, run = WORKERS[args.worker]
    config = load_config(args.config_section or default_section)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)

    logger.info('Starting worker.', extra={'worker': args.worker})
    try:
        run(config, stop_event, consumer_name=args.consumer_name)
    except Exception:
        logger.exception('Worker crashed.', extra={'worker': args.worker})
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
