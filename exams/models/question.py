from django.db import models


class Question(models.Model):
    exam = models.ForeignKey(
        'Exam',
        on_delete=models.CASCADE,
        related_name='questions',
        db_index=True
    )
    question_text = models.TextField()
    options = models.JSONField(default=list)
    correct_option_index = models.PositiveIntegerField()
    explanation = models.TextField(blank=True)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['order', 'id']
        indexes = [
            models.Index(fields=['exam', 'order'], name='question_exam_order_idx'),
        ]

    def __str__(self):
        return f"Q{self.order}: {self.question_text[:50]}..."
