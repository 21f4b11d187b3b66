"""Abstract base class for paste view analytics data access objects (DAOs).

The analytics store keeps pre-aggregated view counters and time series per paste.
Only the write side and deletion live here; aggregation queries are served
elsewhere.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class AnalyticsBaseDAO(ABC):
    """Interface for view analytics data access objects (DAOs)

    Methods:
        record_view(url: str, viewed_at: datetime, **kwargs) -> int:
            Count one view and return the updated total.

        views(url: str, **kwargs) -> int:
            Return the total number of recorded views (0 if none).

        delete(url: str, **kwargs) -> bool:
            Drop all analytics for a paste. Missing data is NOT an error.

    All methods raise DataStoreError on connection or I/O failure.
    """

    @abstractmethod
    def record_view(self, url: str, viewed_at: datetime, **kwargs) -> int:
        pass

    @abstractmethod
    def views(self, url: str, **kwargs) -> int:
        pass

    @abstractmethod
    def delete(self, url: str, **kwargs) -> bool:
        pass
