from cloudpaste.dao.base.paste_base_dao import PasteBaseDAO
from cloudpaste.dao.base.ledger_base_dao import CleanupLedgerBaseDAO
from cloudpaste.dao.base.analytics_base_dao import AnalyticsBaseDAO
from cloudpaste.dao.base.cache_base_dao import PasteCacheBaseDAO


__all__ = [
    'PasteBaseDAO',
    'CleanupLedgerBaseDAO',
    'AnalyticsBaseDAO',
    'PasteCacheBaseDAO',
]
