"""
Duplicate detection for imported question batches.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

WITHIN_FILE = 'within-file'
EXISTING_EXAM = 'existing-exam'

_WHITESPACE = re.compile(r'\s+')


def question_text_key(question_text: Optional[str]) -> str:
    """Comparison key: trimmed, whitespace runs collapsed, lowercased."""
    return _WHITESPACE.sub(' ', str(question_text or '').strip()).lower()


@dataclass
class DuplicateAnalysis:
    duplicate_indexes: Set[int] = field(default_factory=set)
    duplicate_rows: List[dict] = field(default_factory=list)
    duplicate_within_file_count: int = 0
    duplicate_existing_count: int = 0

    @property
    def duplicate_row_count(self) -> int:
        return len(self.duplicate_indexes)

    def importable_count(self, total_rows: int) -> int:
        return total_rows - len(self.duplicate_indexes)


class DuplicateAnalyzer:
    @classmethod
    def analyze(cls, questions: List[dict], existing_questions=None, mode: str = 'append') -> DuplicateAnalysis:
        """
        Flag rows repeating an earlier row of the batch ("within-file") or,
        in append mode, a question already stored on the exam ("existing-exam").

        ``existing_questions`` may hold model instances, dicts or plain strings.
        Replace mode ignores them because they are about to be discarded.
        """
        existing_keys = set()
        if mode == 'append':
            existing_keys = {
                key for key in (question_text_key(cls._text_of(q)) for q in existing_questions or [])
                if key
            }

        analysis = DuplicateAnalysis()
        seen_in_batch: Dict[str, int] = {}
        rows: Dict[int, dict] = {}

        for index, question in enumerate(questions):
            key = question_text_key(question.get('question_text'))
            if not key:
                continue

            first_seen = seen_in_batch.get(key)
            if first_seen is not None:
                analysis.duplicate_within_file_count += 1
                cls._mark(rows, index, question, WITHIN_FILE, first_row_number=first_seen + 1)
            else:
                seen_in_batch[key] = index

            if key in existing_keys:
                analysis.duplicate_existing_count += 1
                cls._mark(rows, index, question, EXISTING_EXAM)

        analysis.duplicate_indexes = set(rows)
        analysis.duplicate_rows = [rows[index] for index in sorted(rows)]
        return analysis

    @staticmethod
    def _mark(rows, index, question, reason, first_row_number=None):
        row = rows.setdefault(index, {
            'row_number': index + 1,
            'question_text': question.get('question_text', ''),
            'reasons': [],
        })
        if reason not in row['reasons']:
            row['reasons'].append(reason)
        if first_row_number and 'first_row_number' not in row:
            row['first_row_number'] = first_row_number

    @staticmethod
    def _text_of(question):
        if isinstance(question, str):
            return question
        if isinstance(question, dict):
            return question.get('question_text')
        return getattr(question, 'question_text', '')
