"""
Question bank browsing, practice sampling and bookmarks.

Only questions of live exams are visible; archiving an exam hides its
questions and the bookmarks pointing at them without deleting anything.
"""
import logging

from django.db import IntegrityError, transaction

from exams.exceptions import BookmarkNotFound, QuestionNotFound
from exams.models import Question, QuestionBookmark

logger = logging.getLogger(__name__)


def parse_positive_int(value, fallback, max_value):
    """Lenient query-string integer: junk falls back, large values are clamped."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return fallback
    if parsed <= 0:
        return fallback
    return min(parsed, max_value)


class QuestionBankService:
    DEFAULT_RANDOM_COUNT = 10
    MAX_RANDOM_COUNT = 50

    @staticmethod
    def visible_questions():
        return Question.objects.filter(exam__is_deleted=False).select_related('exam')

    @classmethod
    def search(cls, category=None, exam_id=None, text=None):
        """Questions across exams, newest exam activity first."""
        queryset = cls._filter(cls.visible_questions(), category, exam_id)
        if text:
            queryset = queryset.filter(question_text__icontains=text.strip())
        return queryset.order_by('-exam__updated_at', 'exam_id', 'order', 'id')

    @classmethod
    def random_sample(cls, count=None, category=None, exam_id=None):
        count = parse_positive_int(count, cls.DEFAULT_RANDOM_COUNT, cls.MAX_RANDOM_COUNT)
        queryset = cls._filter(cls.visible_questions(), category, exam_id)
        return list(queryset.order_by('?')[:count])

    @classmethod
    def get_question(cls, question_id):
        question = cls.visible_questions().filter(pk=question_id).first()
        if question is None:
            raise QuestionNotFound()
        return question

    @classmethod
    def add_bookmark(cls, user, question_id):
        """Bookmark a question; bookmarking twice returns the existing bookmark."""
        question = cls.get_question(question_id)
        try:
            with transaction.atomic():
                bookmark, created = QuestionBookmark.objects.get_or_create(user=user, question=question)
        except IntegrityError:
            # Lost a race with a concurrent request for the same bookmark.
            bookmark, created = QuestionBookmark.objects.get(user=user, question=question), False

        if created:
            logger.info(f"User {user.pk} bookmarked question {question.pk}")
        return bookmark, created

    @staticmethod
    def remove_bookmark(user, question_id):
        deleted, _ = QuestionBookmark.objects.filter(user=user, question_id=question_id).delete()
        if not deleted:
            raise BookmarkNotFound()
        logger.info(f"User {user.pk} removed bookmark on question {question_id}")

    @staticmethod
    def bookmarks(user):
        return QuestionBookmark.objects.filter(
            user=user, question__exam__is_deleted=False
        ).select_related('question__exam').order_by('-created_at', '-id')

    @staticmethod
    def _filter(queryset, category, exam_id):
        if category:
            queryset = queryset.filter(exam__category=category)
        if exam_id is not None and str(exam_id).isdigit():
            queryset = queryset.filter(exam_id=exam_id)
        return queryset
