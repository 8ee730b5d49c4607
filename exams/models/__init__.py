from .exam import Exam
from .question import Question
from .bookmark import QuestionBookmark
from .result import ExamResult
from .upload_history import UploadHistory
from .user_profile import UserProfile

__all__ = [
    'Exam', 'Question', 'QuestionBookmark', 'ExamResult', 'UploadHistory', 'UserProfile',
]
