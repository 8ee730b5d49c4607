from django.db import models
from django.contrib.auth.models import User


class QuestionBookmark(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='question_bookmarks')
    question = models.ForeignKey('Question', on_delete=models.CASCADE, related_name='bookmarks')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'question'], name='unique_question_bookmark'),
        ]
        indexes = [
            models.Index(fields=['user', 'created_at'], name='bookmark_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} -> question {self.question_id}"
