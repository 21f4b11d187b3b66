from cloudpaste.services.retrieval import PasteRetrievalService
from cloudpaste.services.cleanup import CleanupService
from cloudpaste.services.creation import PasteCreationService
from cloudpaste.services.analytics import ViewRecorder


__all__ = [
    'PasteRetrievalService',
    'CleanupService',
    'PasteCreationService',
    'ViewRecorder',
]
