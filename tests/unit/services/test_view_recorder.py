from datetime import datetime, UTC

import pytest

from cloudpaste.models import ExpirationPolicy
from cloudpaste.services import ViewRecorder
from cloudpaste.dao.exceptions import DataStoreError
from cloudpaste.events import BurnAfterReadViewed, PasteCreated, PasteViewed


T0 = datetime(2025, 10, 15, tzinfo=UTC)


class TestViewRecorder:

    @pytest.fixture(autouse=True)
    def setup(self, analytics) -> None:
        self.analytics = analytics
        self.recorder = ViewRecorder(analytics)

    def test_bindings(self) -> None:
        assert list(self.recorder.bindings) == ['paste.viewed']

    def test_handle_viewed(self) -> None:
        self.recorder.handle_event(PasteViewed(url='a1b2c3d4', viewed_at=T0))
        self.recorder.handle_event(PasteViewed(url='a1b2c3d4', viewed_at=T0))

        assert self.analytics.views('a1b2c3d4') == 2

    def test_handle_other_events(self) -> None:
        self.recorder.handle_event(BurnAfterReadViewed(url='a1b2c3d4'))
        self.recorder.handle_event(PasteCreated(url='a1b2c3d4', created_at=T0, expiration_policy=ExpirationPolicy.never()))

        assert self.analytics.counts == {}

    def test_handle_viewed_store_failure_propagates(self) -> None:
        # Raising requeues the message
        self.analytics.fail('record_view', DataStoreError('analytics down'))

        with pytest.raises(DataStoreError):
            self.recorder.handle_event(PasteViewed(url='a1b2c3d4', viewed_at=T0))
