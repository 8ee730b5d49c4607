"""
Validation and canonical shape for imported questions.
"""
import re

from django.conf import settings

from exams.exceptions import (
    EmptyQuestionList, EmptyQuestionText, InsufficientOptions,
    InvalidCorrectIndex, TooManyRows,
)

OPTION_SPLIT_PATTERN = re.compile(r'[|;]')
INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')


class QuestionNormalizer:
    MIN_OPTIONS = 2

    @classmethod
    def normalize_all(cls, raw_questions):
        """Normalize a batch; the first invalid record aborts the whole batch."""
        if not isinstance(raw_questions, list) or not raw_questions:
            raise EmptyQuestionList()
        return [cls.normalize(raw, row_number) for row_number, raw in enumerate(raw_questions, start=1)]

    @classmethod
    def normalize(cls, raw, row_number):
        if not isinstance(raw, dict):
            raw = {}

        question_text = cls._text(cls._field(raw, 'questionText', 'question_text'))
        if not question_text:
            raise EmptyQuestionText(
                f"Question {row_number}: questionText is required", row_number=row_number
            )

        options = cls._options(cls._field(raw, 'options'))
        if len(options) < cls.MIN_OPTIONS:
            raise InsufficientOptions(
                f"Question {row_number}: at least two options are required", row_number=row_number
            )

        correct_option_index = cls._index(cls._field(raw, 'correctOptionIndex', 'correct_option_index'))
        if correct_option_index is None or not 0 <= correct_option_index < len(options):
            raise InvalidCorrectIndex(
                f"Question {row_number}: correctOptionIndex must be between 0 and {len(options) - 1}",
                row_number=row_number
            )

        return {
            'question_text': question_text,
            'options': options,
            'correct_option_index': correct_option_index,
            'explanation': cls._text(cls._field(raw, 'explanation')),
        }

    @staticmethod
    def enforce_row_limit(questions, max_rows=None):
        if max_rows is None:
            max_rows = settings.QUESTION_IMPORT['MAX_ROWS']
        if len(questions) > max_rows:
            raise TooManyRows(max_rows)

    @staticmethod
    def _field(raw, *names):
        for name in names:
            if name in raw:
                return raw[name]
        return None

    @staticmethod
    def _text(value):
        if value is None:
            return ''
        return str(value).strip()

    @staticmethod
    def _options(value):
        if isinstance(value, (list, tuple)):
            items = value
        elif value is None:
            items = []
        else:
            items = OPTION_SPLIT_PATTERN.split(str(value))
        return [str(item).strip() for item in items if item is not None and str(item).strip()]

    @staticmethod
    def _index(value):
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        text = str(value).strip()
        if not INTEGER_PATTERN.fullmatch(text):
            return None
        return int(text)
