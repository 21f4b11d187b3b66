import logging

from cloudpaste.constants import RoutingKey
from cloudpaste.dao.base import AnalyticsBaseDAO
from cloudpaste.events import PasteEvent, PasteViewed


logger = logging.getLogger(__name__)


class ViewRecorder:
    """Count paste views from PasteViewed events ('analytics.events' queue)"""

    bindings = (RoutingKey.PASTE_VIEWED,)

    def __init__(self, analytics: AnalyticsBaseDAO):
        self.analytics = analytics

    def handle_event(self, event: PasteEvent) -> None:
        if not isinstance(event, PasteViewed):
            logger.debug('Ignoring event.', extra={'routingKey': str(event.routing_key), 'url': event.url})
            return

        total = self.analytics.record_view(event.url, event.viewed_at)
        logger.debug('Recorded paste view.', extra={'url': event.url, 'views': total})
