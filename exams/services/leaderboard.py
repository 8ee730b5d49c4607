"""
Leaderboard Service for exam rankings.
Ranks are positions in the sorted list, so tied results get consecutive ranks
in submission order.
"""
from django.db.models import Avg, Count, Max, Min

from exams.exceptions import ExamNotFound
from exams.models import Exam, ExamResult


class LeaderboardService:
    """
    Service for generating per-exam leaderboards.
    Order: score descending, then fastest time, then earliest submission.
    """
    DEFAULT_LIMIT = 50

    @classmethod
    def get_exam_leaderboard(cls, exam_id: int, limit: int = DEFAULT_LIMIT) -> dict:
        exam = Exam.objects.filter(pk=exam_id).first()
        if exam is None:
            raise ExamNotFound()

        submitted = ExamResult.objects.filter(exam=exam, status=ExamResult.Status.SUBMITTED)
        results = submitted.select_related('user').order_by(
            '-score', 'time_taken_seconds', 'submitted_at', 'id'
        )[:limit]

        leaderboard = []
        for rank, result in enumerate(results, start=1):
            leaderboard.append({
                'rank': rank,
                'user_id': result.user_id,
                'name': result.user.get_full_name() or result.user.username,
                'score': float(result.score),
                'percentage': float(result.percentage),
                'correct_answers': result.correct_answers,
                'total_questions': result.total_questions,
                'time_taken_seconds': result.time_taken_seconds,
                'submitted_at': result.submitted_at,
            })

        stats = submitted.aggregate(
            total_submissions=Count('id'),
            avg_score=Avg('score'),
            max_score=Max('score'),
            min_score=Min('score')
        )

        return {
            'exam_id': exam.pk,
            'exam_title': exam.title,
            'leaderboard': leaderboard,
            'statistics': {
                'total_submissions': stats['total_submissions'] or 0,
                'average_score': round(float(stats['avg_score'] or 0), 2),
                'highest_score': round(float(stats['max_score'] or 0), 2),
                'lowest_score': round(float(stats['min_score'] or 0), 2),
            }
        }
