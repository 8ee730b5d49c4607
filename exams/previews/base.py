import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings
from django.utils import timezone

from exams.exceptions import PreviewForbidden, PreviewNotFound

logger = logging.getLogger(__name__)


@dataclass
class UploadPreview:
    preview_id: str
    admin_id: str
    exam_id: int
    exam_title: str
    file_name: str
    mode: str
    questions: List[dict]
    duplicate_indexes: List[int]
    duplicate_rows: List[dict]
    duplicate_within_file_count: int
    duplicate_existing_count: int
    expires_at: datetime
    created_at: datetime = field(default_factory=timezone.now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or timezone.now())

    @property
    def total_rows(self) -> int:
        return len(self.questions)

    @property
    def importable_count(self) -> int:
        return len(self.questions) - len(self.duplicate_indexes)


class PreviewStore(ABC):
    """
    Short-lived, admin-owned storage for parsed uploads awaiting a commit.

    Expired entries are purged lazily whenever a preview is created or read;
    ``sweep_expired`` and ``delete`` can also be called directly for
    active eviction.
    """

    def __init__(self, ttl_minutes: Optional[int] = None):
        if ttl_minutes is None:
            ttl_minutes = settings.QUESTION_IMPORT.get('PREVIEW_TTL_MINUTES', 15)
        self.ttl = timedelta(minutes=ttl_minutes)

    @staticmethod
    def generate_id() -> str:
        return secrets.token_urlsafe(16)

    def create(self, questions, analysis, exam_id, exam_title, file_name, mode, admin_id) -> UploadPreview:
        self.sweep_expired()

        now = timezone.now()
        preview = UploadPreview(
            preview_id=self.generate_id(),
            admin_id=str(admin_id),
            exam_id=exam_id,
            exam_title=exam_title,
            file_name=file_name,
            mode=mode,
            questions=list(questions),
            duplicate_indexes=sorted(analysis.duplicate_indexes),
            duplicate_rows=list(analysis.duplicate_rows),
            duplicate_within_file_count=analysis.duplicate_within_file_count,
            duplicate_existing_count=analysis.duplicate_existing_count,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self._save(preview)
        logger.info(f"Upload preview {preview.preview_id} created for exam {exam_id} by admin {admin_id}")
        return preview

    def get(self, preview_id: str, admin_id) -> UploadPreview:
        self.sweep_expired()

        preview = self._load(preview_id)
        if preview is None or preview.is_expired():
            raise PreviewNotFound()
        if preview.admin_id != str(admin_id):
            logger.warning(f"Admin {admin_id} tried to read upload preview {preview_id} owned by {preview.admin_id}")
            raise PreviewForbidden()
        return preview

    def take(self, preview_id: str, admin_id) -> UploadPreview:
        """
        Claim a preview for commit: ownership is checked as in ``get`` and the
        entry is removed in one step, so only one caller can ever receive it.
        """
        self.get(preview_id, admin_id)
        preview = self._pop(preview_id)
        if preview is None or preview.is_expired():
            raise PreviewNotFound()
        return preview

    def put_back(self, preview: UploadPreview) -> None:
        """Return a claimed preview whose commit failed."""
        if not preview.is_expired():
            self._save(preview)

    @abstractmethod
    def delete(self, preview_id: str) -> bool:
        pass

    @abstractmethod
    def sweep_expired(self) -> int:
        """Remove expired entries; returns how many were dropped."""
        pass

    @abstractmethod
    def _save(self, preview: UploadPreview) -> None:
        pass

    @abstractmethod
    def _load(self, preview_id: str) -> Optional[UploadPreview]:
        pass

    @abstractmethod
    def _pop(self, preview_id: str) -> Optional[UploadPreview]:
        """Remove and return an entry atomically; None when already gone."""
        pass
