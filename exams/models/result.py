from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone


class ExamResult(models.Model):
    """One user's attempt at one exam, graded once on submit."""

    class Status(models.TextChoices):
        IN_PROGRESS = 'in_progress', 'In Progress'
        SUBMITTED = 'submitted', 'Submitted'

    exam = models.ForeignKey(
        'Exam',
        on_delete=models.CASCADE,
        related_name='results',
        db_index=True
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='exam_results',
        db_index=True
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.IN_PROGRESS,
        db_index=True
    )

    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)

    # [{"question_id": 3, "selected_option_index": 1, "is_correct": true}, ...]
    answers = models.JSONField(default=list, blank=True)
    total_questions = models.PositiveIntegerField(default=0)
    attempted_questions = models.PositiveIntegerField(default=0)
    correct_answers = models.PositiveIntegerField(default=0)
    score = models.DecimalField(max_digits=9, decimal_places=2, default=0)
    percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    time_taken_seconds = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-submitted_at', '-created_at']
        indexes = [
            models.Index(fields=['exam', 'user', 'status'], name='result_exam_user_status_idx'),
            models.Index(fields=['user', 'status', 'submitted_at'], name='result_user_submitted_idx'),
            models.Index(fields=['exam', 'status', 'score'], name='result_exam_score_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'user'],
                condition=models.Q(status='in_progress'),
                name='unique_in_progress_attempt'
            )
        ]

    def __str__(self):
        return f"{self.user.username} - {self.exam.title} ({self.get_status_display()})"

    @property
    def is_submitted(self):
        return self.status == self.Status.SUBMITTED
