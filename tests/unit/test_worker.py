import signal
import threading
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch
from apscheduler.triggers.interval import IntervalTrigger

from cloudpaste import worker
from cloudpaste.services import CleanupService, ViewRecorder
from cloudpaste.events import RedisStreamConsumer
from cloudpaste.dao.exceptions import DataStoreError


class TestSweepScheduling:

    def test_run_sweep_job(self) -> None:
        service = MagicMock(spec=CleanupService)

        worker.run_sweep_job(service)

        service.run_sweep.assert_called_once_with()

    def test_run_sweep_job_swallows_failures(self) -> None:
        service = MagicMock(spec=CleanupService)
        service.run_sweep.side_effect = DataStoreError('ledger down')

        worker.run_sweep_job(service)  # must not raise

    def test_create_scheduler(self) -> None:
        service = MagicMock(spec=CleanupService)

        scheduler = worker.create_scheduler(service, interval_seconds=30)
        job = scheduler.get_job('cleanup_sweep')

        assert isinstance(job.trigger, IntervalTrigger)
        assert job.trigger.interval.total_seconds() == 30
        assert job.args == (service,)
        assert job.max_instances == 1
        assert job.coalesce is True


class TestRunWorkers:

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch) -> None:
        self.service = MagicMock(spec=CleanupService)
        self.recorder = MagicMock(spec=ViewRecorder)
        self.consumer = MagicMock(spec=RedisStreamConsumer)
        self.consumer.consumer_name = 'hostname'
        self.scheduler = MagicMock()
        self.build_consumer = MagicMock(return_value=self.consumer)
        self.create_scheduler = MagicMock(return_value=self.scheduler)

        monkeypatch.setattr(worker, 'build_cleanup_service', MagicMock(return_value=self.service))
        monkeypatch.setattr(worker, 'build_view_recorder', MagicMock(return_value=self.recorder))
        monkeypatch.setattr(worker, 'build_consumer', self.build_consumer)
        monkeypatch.setattr(worker, 'create_scheduler', self.create_scheduler)

        self.stop_event = threading.Event()

    def test_run_cleanup_worker(self) -> None:
        config = {'sweep': {'interval_seconds': 15}}

        worker.run_cleanup_worker(config, self.stop_event, consumer_name='cleanup-1')

        self.build_consumer.assert_called_once_with(config, 'cleanup.events', CleanupService.bindings)
        self.create_scheduler.assert_called_once_with(self.service, 15)
        self.scheduler.start.assert_called_once_with()
        self.consumer.consume.assert_called_once_with(self.service.handle_event, self.stop_event)
        assert self.consumer.consumer_name == 'cleanup-1'

        # Graceful shutdown
        self.scheduler.shutdown.assert_called_once_with(wait=True)
        self.service.close.assert_called_once_with()

    def test_run_cleanup_worker_default_interval(self) -> None:
        worker.run_cleanup_worker({}, self.stop_event)

        self.create_scheduler.assert_called_once_with(self.service, 60)
        assert self.consumer.consumer_name == 'hostname'

    def test_run_cleanup_worker_shuts_down_on_failure(self) -> None:
        self.consumer.consume.side_effect = DataStoreError('channel down')

        with pytest.raises(DataStoreError):
            worker.run_cleanup_worker({}, self.stop_event)

        self.scheduler.shutdown.assert_called_once_with(wait=True)
        self.service.close.assert_called_once_with()

    def test_run_analytics_worker(self) -> None:
        worker.run_analytics_worker({}, self.stop_event)

        self.build_consumer.assert_called_once_with({}, 'analytics.events', ViewRecorder.bindings)
        self.consumer.consume.assert_called_once_with(self.recorder.handle_event, self.stop_event)


class TestMain:

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch) -> None:
        self.run = MagicMock()
        self.load_config = MagicMock(return_value={'events': {}})
        monkeypatch.setitem(worker.WORKERS, 'cleanup', ('cleanup_worker', self.run))
        monkeypatch.setattr(worker, 'load_config', self.load_config)
        monkeypatch.setattr(worker, 'initialize_logging', MagicMock())
        monkeypatch.setattr(worker, 'install_signal_handlers', MagicMock())

    def test_main(self) -> None:
        assert worker.main(['cleanup', '--consumer-name', 'cleanup-1']) == 0

        self.load_config.assert_called_once_with('cleanup_worker')
        config, stop_event = self.run.call_args.args
        assert config == {'events': {}}
        assert isinstance(stop_event, threading.Event)
        assert self.run.call_args.kwargs == {'consumer_name': 'cleanup-1'}

    def test_main_with_config_section(self) -> None:
        worker.main(['cleanup', '--config-section', 'cleanup_worker_eu'])
        self.load_config.assert_called_once_with('cleanup_worker_eu')

    def test_main_worker_crash(self) -> None:
        self.run.side_effect = DataStoreError('redis down')
        assert worker.main(['cleanup']) == 1

    def test_main_unknown_worker(self) -> None:
        with pytest.raises(SystemExit):
            worker.main(['billing'])


def test_install_signal_handlers(monkeypatch: MonkeyPatch) -> None:
    handlers = {}
    monkeypatch.setattr(worker.signal, 'signal', lambda signum, handler: handlers.__setitem__(signum, handler))
    stop_event = threading.Event()

    worker.install_signal_handlers(stop_event)
    handlers[signal.SIGTERM](signal.SIGTERM, None)

    assert set(handlers) == {signal.SIGINT, signal.SIGTERM}
    assert stop_event.is_set()
