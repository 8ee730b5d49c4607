from django.db import models
from django.contrib.auth.models import User


class UploadHistory(models.Model):
    """Append-only audit trail of file-based question imports."""

    class Mode(models.TextChoices):
        APPEND = 'append', 'Append'
        REPLACE = 'replace', 'Replace'

    class DuplicateHandling(models.TextChoices):
        SKIP = 'skip', 'Skip duplicates'
        ALLOW = 'allow', 'Allow duplicates'

    uploader = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name='question_uploads'
    )
    exam = models.ForeignKey(
        'Exam',
        on_delete=models.CASCADE,
        related_name='upload_history'
    )
    file_name = models.CharField(max_length=260)
    mode = models.CharField(max_length=10, choices=Mode.choices)
    duplicate_handling = models.CharField(
        max_length=10,
        choices=DuplicateHandling.choices,
        default=DuplicateHandling.SKIP
    )
    total_rows = models.PositiveIntegerField()
    imported_count = models.PositiveIntegerField()
    skipped_duplicate_count = models.PositiveIntegerField(default=0)
    duplicate_within_file_count = models.PositiveIntegerField(default=0)
    duplicate_existing_count = models.PositiveIntegerField(default=0)
    preview_id = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'upload history'
        indexes = [
            models.Index(fields=['exam', 'created_at'], name='upload_exam_created_idx'),
            models.Index(fields=['uploader', 'created_at'], name='upload_uploader_created_idx'),
        ]

    def __str__(self):
        return f"{self.file_name} -> {self.exam_id} ({self.imported_count}/{self.total_rows})"

    def save(self, *args, **kwargs):
        if self.pk is not None and not kwargs.get('force_insert'):
            raise ValueError("Upload history entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Upload history entries cannot be deleted.")

    @classmethod
    def record(cls, uploader, exam_id, file_name, mode, duplicate_handling, total_rows,
               imported_count, duplicate_within_file_count=0, duplicate_existing_count=0,
               preview_id=''):
        return cls.objects.create(
            uploader=uploader,
            exam_id=exam_id,
            file_name=(file_name or 'upload-file')[:260],
            mode=mode,
            duplicate_handling=duplicate_handling,
            total_rows=total_rows,
            imported_count=imported_count,
            skipped_duplicate_count=max(total_rows - imported_count, 0),
            duplicate_within_file_count=duplicate_within_file_count,
            duplicate_existing_count=duplicate_existing_count,
            preview_id=preview_id or ''
        )
