from .question_parser import QuestionFileParser
from .question_normalizer import QuestionNormalizer
from .duplicates import DuplicateAnalyzer, DuplicateAnalysis
from .question_import import QuestionImportCommitter, QuestionImportService, ImportOutcome
from .question_bank import QuestionBankService
from .exam_attempt import ExamAttemptService
from .leaderboard import LeaderboardService

__all__ = [
    'QuestionFileParser', 'QuestionNormalizer', 'DuplicateAnalyzer', 'DuplicateAnalysis',
    'QuestionImportCommitter', 'QuestionImportService', 'ImportOutcome',
    'QuestionBankService', 'ExamAttemptService', 'LeaderboardService'
]
