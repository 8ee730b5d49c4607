"""
Question import workflows: direct file upload, preview/commit and bulk JSON.
"""
import csv
import io
import json
import logging
from dataclasses import asdict, dataclass

from django.conf import settings
from django.db import transaction
from django.db.models import Max

from exams.exceptions import ExamNotFound, FileTooLarge, InvalidImportOption
from exams.models import Exam, Question, UploadHistory
from exams.previews import get_preview_store
from .duplicates import DuplicateAnalyzer
from .question_normalizer import QuestionNormalizer
from .question_parser import QuestionFileParser

logger = logging.getLogger(__name__)

APPEND = UploadHistory.Mode.APPEND
REPLACE = UploadHistory.Mode.REPLACE
SKIP = UploadHistory.DuplicateHandling.SKIP
ALLOW = UploadHistory.DuplicateHandling.ALLOW


def normalize_mode(mode):
    value = str(mode or APPEND).strip().lower()
    if value not in UploadHistory.Mode.values:
        raise InvalidImportOption('mode must be either append or replace')
    return value


def normalize_duplicate_handling(duplicate_handling):
    value = str(duplicate_handling or SKIP).strip().lower()
    if value not in UploadHistory.DuplicateHandling.values:
        raise InvalidImportOption('duplicate_handling must be either skip or allow')
    return value


@dataclass
class ImportOutcome:
    file_name: str
    mode: str
    duplicate_handling: str
    total_rows: int
    imported_count: int
    duplicate_within_file_count: int
    duplicate_existing_count: int
    total_questions: int

    @property
    def skipped_duplicate_count(self):
        return max(self.total_rows - self.imported_count, 0)

    def as_dict(self):
        data = asdict(self)
        data['skipped_duplicate_count'] = self.skipped_duplicate_count
        return data


class QuestionImportCommitter:
    """Writes a selected batch to an exam and records the upload."""

    @staticmethod
    def select_questions(questions, duplicate_indexes, duplicate_handling):
        if duplicate_handling == ALLOW:
            return list(questions)
        flagged = set(duplicate_indexes)
        return [question for index, question in enumerate(questions) if index not in flagged]

    @staticmethod
    def lock_exam(exam_id):
        """Re-resolve the exam inside the caller's transaction; deleted exams count as missing."""
        exam = Exam.objects.select_for_update().filter(pk=exam_id).first()
        if exam is None:
            raise ExamNotFound()
        return exam

    @staticmethod
    def apply_questions(exam, mode, questions):
        """Append or replace the exam's questions. Returns the new question count."""
        if mode == REPLACE:
            exam.questions.all().delete()
            start = 0
        else:
            start = exam.questions.aggregate(last=Max('order'))['last'] or 0

        Question.objects.bulk_create([
            Question(
                exam=exam,
                question_text=question['question_text'],
                options=question['options'],
                correct_option_index=question['correct_option_index'],
                explanation=question.get('explanation', ''),
                order=start + position
            )
            for position, question in enumerate(questions, start=1)
        ])
        exam.save(update_fields=['updated_at'])
        return exam.questions.count()

    @classmethod
    def commit(cls, exam_id, mode, questions, duplicate_indexes, duplicate_handling, uploader,
               file_name, duplicate_within_file_count=0, duplicate_existing_count=0, preview_id=''):
        selected = cls.select_questions(questions, duplicate_indexes, duplicate_handling)

        with transaction.atomic():
            exam = cls.lock_exam(exam_id)
            total_questions = cls.apply_questions(exam, mode, selected)
            UploadHistory.record(
                uploader=uploader,
                exam_id=exam.pk,
                file_name=file_name,
                mode=mode,
                duplicate_handling=duplicate_handling,
                total_rows=len(questions),
                imported_count=len(selected),
                duplicate_within_file_count=duplicate_within_file_count,
                duplicate_existing_count=duplicate_existing_count,
                preview_id=preview_id
            )

        logger.info(
            f"Imported {len(selected)}/{len(questions)} questions into exam {exam_id} "
            f"(mode={mode}, duplicates={duplicate_handling}, preview={preview_id or '-'})"
        )
        return ImportOutcome(
            file_name=file_name,
            mode=mode,
            duplicate_handling=duplicate_handling,
            total_rows=len(questions),
            imported_count=len(selected),
            duplicate_within_file_count=duplicate_within_file_count,
            duplicate_existing_count=duplicate_existing_count,
            total_questions=total_questions
        )


class QuestionImportService:
    @staticmethod
    def load_batch(content, file_name, mime_type):
        """Size check, parse, normalize and row-limit an uploaded file."""
        max_size = settings.QUESTION_IMPORT['MAX_FILE_SIZE_BYTES']
        if len(content) > max_size:
            raise FileTooLarge(max_size)

        raw_questions = QuestionFileParser.parse(content, file_name, mime_type)
        questions = QuestionNormalizer.normalize_all(raw_questions)
        QuestionNormalizer.enforce_row_limit(questions)
        return questions

    @staticmethod
    def analyze_against_exam(exam_id, mode, questions):
        exam = Exam.objects.filter(pk=exam_id).first()
        if exam is None:
            raise ExamNotFound()

        existing = []
        if mode == APPEND:
            existing = list(exam.questions.values_list('question_text', flat=True))
        return exam, DuplicateAnalyzer.analyze(questions, existing, mode)

    @classmethod
    def preview_import(cls, exam_id, mode, content, file_name, mime_type, admin, store=None):
        mode = normalize_mode(mode)
        file_name = file_name or 'upload-file'
        questions = cls.load_batch(content, file_name, mime_type)
        exam, analysis = cls.analyze_against_exam(exam_id, mode, questions)

        store = store or get_preview_store()
        preview = store.create(
            questions=questions,
            analysis=analysis,
            exam_id=exam.pk,
            exam_title=exam.title,
            file_name=file_name,
            mode=mode,
            admin_id=admin.pk
        )
        return cls.build_preview_response(preview)

    @staticmethod
    def build_preview_response(preview):
        config = settings.QUESTION_IMPORT
        sample_size = config.get('PREVIEW_SAMPLE_SIZE', 5)
        duplicate_limit = config.get('DUPLICATE_ROWS_RESPONSE_LIMIT', 50)

        return {
            'preview_id': preview.preview_id,
            'exam': {'id': preview.exam_id, 'title': preview.exam_title},
            'exam_title': preview.exam_title,
            'file_name': preview.file_name,
            'mode': preview.mode,
            'expires_at': preview.expires_at.isoformat(),
            'limits': {
                'max_file_size_bytes': config['MAX_FILE_SIZE_BYTES'],
                'max_rows': config['MAX_ROWS'],
            },
            'counts': {
                'total_rows': preview.total_rows,
                'importable_count': preview.importable_count,
                'duplicate_rows': len(preview.duplicate_indexes),
                'duplicate_within_file_count': preview.duplicate_within_file_count,
                'duplicate_existing_count': preview.duplicate_existing_count,
            },
            'duplicate_rows': preview.duplicate_rows[:duplicate_limit],
            'sample_questions': [
                {
                    'row_number': row_number,
                    'question_text': question['question_text'],
                    'option_count': len(question['options']),
                    'correct_option_index': question['correct_option_index'],
                }
                for row_number, question in enumerate(preview.questions[:sample_size], start=1)
            ],
        }

    @classmethod
    def commit_import(cls, preview_id, duplicate_handling, admin, store=None):
        duplicate_handling = normalize_duplicate_handling(duplicate_handling)
        preview_id = str(preview_id or '').strip()
        if not preview_id:
            raise InvalidImportOption('preview_id is required')

        store = store or get_preview_store()
        # A concurrent commit of the same preview gets PreviewNotFound.
        preview = store.take(preview_id, admin.pk)
        try:
            outcome = QuestionImportCommitter.commit(
                exam_id=preview.exam_id,
                mode=preview.mode,
                questions=preview.questions,
                duplicate_indexes=preview.duplicate_indexes,
                duplicate_handling=duplicate_handling,
                uploader=admin,
                file_name=preview.file_name,
                duplicate_within_file_count=preview.duplicate_within_file_count,
                duplicate_existing_count=preview.duplicate_existing_count,
                preview_id=preview_id
            )
        except Exception:
            store.put_back(preview)
            raise
        return outcome.as_dict()

    @classmethod
    def direct_file_import(cls, exam_id, mode, content, file_name, mime_type, uploader,
                           duplicate_handling=SKIP):
        mode = normalize_mode(mode)
        duplicate_handling = normalize_duplicate_handling(duplicate_handling)
        file_name = file_name or 'upload-file'
        questions = cls.load_batch(content, file_name, mime_type)
        _, analysis = cls.analyze_against_exam(exam_id, mode, questions)

        outcome = QuestionImportCommitter.commit(
            exam_id=exam_id,
            mode=mode,
            questions=questions,
            duplicate_indexes=analysis.duplicate_indexes,
            duplicate_handling=duplicate_handling,
            uploader=uploader,
            file_name=file_name,
            duplicate_within_file_count=analysis.duplicate_within_file_count,
            duplicate_existing_count=analysis.duplicate_existing_count
        )
        return outcome.as_dict()

    @staticmethod
    def bulk_json_import(exam_id, mode, questions):
        """Validated write without duplicate analysis or upload history."""
        mode = normalize_mode(mode)
        normalized = QuestionNormalizer.normalize_all(questions)
        QuestionNormalizer.enforce_row_limit(normalized)

        with transaction.atomic():
            exam = QuestionImportCommitter.lock_exam(exam_id)
            total_questions = QuestionImportCommitter.apply_questions(exam, mode, normalized)

        logger.info(f"Bulk JSON import of {len(normalized)} questions into exam {exam_id} (mode={mode})")
        return {
            'mode': mode,
            'imported_count': len(normalized),
            'total_questions': total_questions,
        }

    @staticmethod
    def get_csv_template():
        """Return CSV template for question import."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(['questionText', 'options', 'correctOptionIndex', 'explanation'])
        writer.writerow(['What is 2+2?', '3|4|5|6', '1', 'Basic addition'])
        writer.writerow(['Capital of Bangladesh?', 'Dhaka|Khulna|Sylhet', '0', ''])
        writer.writerow(['Which number is prime, 9 or 7?', '9|7', '1', 'Quoted fields may contain commas'])
        return output.getvalue()

    @staticmethod
    def get_json_template():
        """Return JSON template for question import."""
        return json.dumps({
            "questions": [
                {
                    "questionText": "What is 2+2?",
                    "options": ["3", "4", "5", "6"],
                    "correctOptionIndex": 1,
                    "explanation": "Basic addition"
                },
                {
                    "questionText": "Capital of Bangladesh?",
                    "options": ["Dhaka", "Khulna", "Sylhet"],
                    "correctOptionIndex": 0
                }
            ]
        }, indent=2)
