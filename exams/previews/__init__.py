from .base import PreviewStore, UploadPreview
from .memory import InMemoryPreviewStore
from .cache import CachePreviewStore
from .factory import get_preview_store

__all__ = ['PreviewStore', 'UploadPreview', 'InMemoryPreviewStore', 'CachePreviewStore', 'get_preview_store']
