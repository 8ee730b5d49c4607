import math

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from .base import PreviewStore


class CachePreviewStore(PreviewStore):
    """
    Store backed by the Django cache framework, so previews survive across
    processes when the cache is shared. Expiry is delegated to the cache
    timeout.
    """
    KEY_PREFIX = 'question-preview'
    CLAIM_TIMEOUT_SECONDS = 30

    def __init__(self, ttl_minutes=None, cache_alias=None):
        super().__init__(ttl_minutes)
        if cache_alias is None:
            cache_alias = settings.QUESTION_IMPORT.get('PREVIEW_CACHE_ALIAS', 'default')
        self.cache = caches[cache_alias]

    def _key(self, preview_id):
        return f"{self.KEY_PREFIX}:{preview_id}"

    def _claim_key(self, preview_id):
        return f"{self.KEY_PREFIX}:{preview_id}:claim"

    def delete(self, preview_id):
        return bool(self.cache.delete(self._key(preview_id)))

    def sweep_expired(self):
        return 0

    def _save(self, preview):
        remaining = (preview.expires_at - timezone.now()).total_seconds()
        timeout = max(1, math.ceil(min(remaining, self.ttl.total_seconds())))
        self.cache.set(self._key(preview.preview_id), preview, timeout=timeout)

    def _load(self, preview_id):
        return self.cache.get(self._key(preview_id))

    def _pop(self, preview_id):
        # cache.add only succeeds for the first caller, across processes too.
        claim_key = self._claim_key(preview_id)
        if not self.cache.add(claim_key, True, timeout=self.CLAIM_TIMEOUT_SECONDS):
            return None
        try:
            preview = self.cache.get(self._key(preview_id))
            self.cache.delete(self._key(preview_id))
        finally:
            self.cache.delete(claim_key)
        return preview
