from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator

from .soft_delete import SoftDeleteModel


class Exam(SoftDeleteModel):
    class Category(models.TextChoices):
        BCS = 'BCS', 'BCS'
        PRIMARY = 'Primary', 'Primary'
        NTRCA = 'NTRCA', 'NTRCA'
        BANK = 'Bank', 'Bank'
        OTHERS = 'Others', 'Others'

    title = models.CharField(max_length=300)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        db_index=True
    )
    total_marks = models.PositiveIntegerField(default=100)
    duration_minutes = models.PositiveIntegerField(
        default=60,
        validators=[MinValueValidator(1), MaxValueValidator(600)]
    )
    exam_date = models.DateTimeField()
    is_featured = models.BooleanField(default=False)
    enrolled_students = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(SoftDeleteModel.Meta):
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_deleted', 'created_at'], name='exam_alive_created_idx'),
            models.Index(fields=['is_deleted', 'category', 'created_at'], name='exam_alive_category_idx'),
            models.Index(fields=['is_deleted', 'is_featured', 'exam_date'], name='exam_alive_featured_idx'),
        ]

    def __str__(self):
        return self.title

    def get_question_count(self):
        return self.questions.count()
