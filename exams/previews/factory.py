import threading

from django.conf import settings

from .base import PreviewStore
from .cache import CachePreviewStore
from .memory import InMemoryPreviewStore

_stores = {}
_lock = threading.Lock()


def get_preview_store(backend: str = None) -> PreviewStore:
    if backend is None:
        backend = settings.QUESTION_IMPORT.get('PREVIEW_BACKEND', 'memory')
    with _lock:
        if backend not in _stores:
            _stores[backend] = CachePreviewStore() if backend == 'cache' else InMemoryPreviewStore()
        return _stores[backend]
