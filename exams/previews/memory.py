import threading

from django.utils import timezone

from .base import PreviewStore


class InMemoryPreviewStore(PreviewStore):
    """Process-local store; suitable for a single application instance."""

    def __init__(self, ttl_minutes=None):
        super().__init__(ttl_minutes)
        self._previews = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._previews)

    def delete(self, preview_id):
        with self._lock:
            return self._previews.pop(preview_id, None) is not None

    def sweep_expired(self):
        now = timezone.now()
        with self._lock:
            expired = [key for key, preview in self._previews.items() if preview.is_expired(now)]
            for key in expired:
                del self._previews[key]
        return len(expired)

    def clear(self):
        with self._lock:
            self._previews.clear()

    def _save(self, preview):
        with self._lock:
            self._previews[preview.preview_id] = preview

    def _load(self, preview_id):
        with self._lock:
            return self._previews.get(preview_id)

    def _pop(self, preview_id):
        with self._lock:
            return self._previews.pop(preview_id, None)
