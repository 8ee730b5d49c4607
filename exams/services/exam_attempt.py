"""
Exam attempt lifecycle: start (idempotent) and submit (graded once).

An attempt is an ExamResult moving from ``in_progress`` to ``submitted``.
There is no server-side deadline: a late submit is graded like any other.
"""
import logging
import math
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from exams.exceptions import ExamNotFound, NoActiveSession
from exams.models import Exam, ExamResult

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def _round(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class ExamAttemptService:
    @staticmethod
    def _get_exam(exam_id, lock=False):
        queryset = Exam.objects.select_for_update() if lock else Exam.objects
        exam = queryset.filter(pk=exam_id).first()
        if exam is None:
            raise ExamNotFound()
        return exam

    @classmethod
    def start(cls, exam_id, user):
        """
        Return ``(result, created)``. A retried start returns the existing
        in-progress attempt unchanged; only a new attempt bumps the exam's
        enrolled-student counter.
        """
        with transaction.atomic():
            exam = cls._get_exam(exam_id, lock=True)

            existing = ExamResult.objects.filter(
                exam=exam, user=user, status=ExamResult.Status.IN_PROGRESS
            ).order_by('-created_at', '-id').first()
            if existing:
                return existing, False

            result = ExamResult.objects.create(
                exam=exam,
                user=user,
                status=ExamResult.Status.IN_PROGRESS,
                started_at=timezone.now(),
                total_questions=exam.questions.count()
            )
            Exam.objects.filter(pk=exam.pk).update(enrolled_students=F('enrolled_students') + 1)

        logger.info(f"User {user.pk} started exam {exam.pk} (result {result.pk})")
        return result, True

    @staticmethod
    def grade(questions, answers):
        """
        Mark answers against the answer key.

        Answers naming a question that is not part of the exam are dropped
        without error, so ``attempted`` may be lower than ``len(answers)``.
        """
        by_id = {str(question.pk): question for question in questions}
        evaluated = []
        correct = 0

        for answer in answers:
            question = by_id.get(str(answer.get('question_id')))
            if question is None:
                continue

            selected = int(answer['selected_option_index'])
            is_correct = selected == question.correct_option_index
            if is_correct:
                correct += 1
            evaluated.append({
                'question_id': question.pk,
                'selected_option_index': selected,
                'is_correct': is_correct,
            })

        return evaluated, correct

    @staticmethod
    def calculate_score(correct_answers, total_questions, total_marks):
        if total_questions == 0:
            percentage = Decimal('0.00')
        else:
            percentage = _round(Decimal(correct_answers) * 100 / Decimal(total_questions))
        score = _round(percentage / 100 * Decimal(total_marks))
        return percentage, score

    @classmethod
    def submit(cls, exam_id, user, answers):
        exam = cls._get_exam(exam_id)

        with transaction.atomic():
            result = ExamResult.objects.select_for_update().filter(
                exam=exam, user=user, status=ExamResult.Status.IN_PROGRESS
            ).order_by('-created_at', '-id').first()
            if result is None:
                raise NoActiveSession()

            questions = list(exam.questions.all())
            evaluated, correct = cls.grade(questions, answers or [])
            percentage, score = cls.calculate_score(correct, len(questions), exam.total_marks)
            submitted_at = timezone.now()

            result.answers = evaluated
            result.status = ExamResult.Status.SUBMITTED
            result.submitted_at = submitted_at
            result.total_questions = len(questions)
            result.attempted_questions = len(evaluated)
            result.correct_answers = correct
            result.percentage = percentage
            result.score = score
            result.time_taken_seconds = max(
                0, math.floor((submitted_at - result.started_at).total_seconds())
            )
            result.save()

        logger.info(
            f"User {user.pk} submitted exam {exam.pk}: {correct}/{len(questions)} correct, "
            f"score {score} ({len(answers or []) - len(evaluated)} unknown answers dropped)"
        )
        return result
