"""
Error taxonomy for question imports and exam attempts.

Every error is a DRF APIException, so views can let them propagate and DRF
renders them with the right status code.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied


class ImportValidationError(APIException):
    """Malformed input the client can correct."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid question data.'
    default_code = 'invalid'

    def __init__(self, detail=None, code=None, row_number=None):
        super().__init__(detail, code)
        self.row_number = row_number


class UnsupportedFormat(ImportValidationError):
    default_detail = 'Unsupported file format. Upload .json or .csv'
    default_code = 'unsupported_format'


class InvalidJson(ImportValidationError):
    default_detail = 'Invalid JSON file'
    default_code = 'invalid_json'


class EmptyFile(ImportValidationError):
    default_detail = 'Uploaded file is empty'
    default_code = 'empty_file'


class MalformedHeader(ImportValidationError):
    default_detail = 'CSV header must include questionText, options, and correctOptionIndex columns'
    default_code = 'malformed_header'


class EmptyQuestionList(ImportValidationError):
    default_detail = 'Question list must be a non-empty array'
    default_code = 'empty_question_list'


class EmptyQuestionText(ImportValidationError):
    default_code = 'empty_question_text'


class InsufficientOptions(ImportValidationError):
    default_code = 'insufficient_options'


class InvalidCorrectIndex(ImportValidationError):
    default_code = 'invalid_correct_index'


class InvalidImportOption(ImportValidationError):
    default_code = 'invalid_option'


class ResourceNotFound(NotFound):
    default_code = 'not_found'


class ExamNotFound(ResourceNotFound):
    default_detail = 'Exam not found'
    default_code = 'exam_not_found'


class PreviewNotFound(ResourceNotFound):
    default_detail = 'Upload preview not found or expired. Please upload and preview again'
    default_code = 'preview_not_found'


class ResultNotFound(ResourceNotFound):
    default_detail = 'Result not found'
    default_code = 'result_not_found'


class QuestionNotFound(ResourceNotFound):
    default_detail = 'Question not found'
    default_code = 'question_not_found'


class BookmarkNotFound(ResourceNotFound):
    default_detail = 'Bookmark not found'
    default_code = 'bookmark_not_found'


class UserNotFound(ResourceNotFound):
    default_detail = 'User not found'
    default_code = 'user_not_found'


class NoActiveSession(ResourceNotFound):
    # The session is missing, but the caller skipped the start step: 400.
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'No active exam session found. Start the exam first.'
    default_code = 'no_active_session'


class PreviewForbidden(PermissionDenied):
    default_detail = 'This upload preview belongs to another admin account'
    default_code = 'preview_forbidden'


class LimitExceeded(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Upload limit exceeded.'
    default_code = 'limit_exceeded'

    def __init__(self, limit, detail=None, code=None):
        self.limit = limit
        super().__init__(detail, code)


class FileTooLarge(LimitExceeded):
    default_code = 'file_too_large'

    def __init__(self, limit, detail=None, code=None):
        if detail is None:
            detail = f"File size exceeds limit. Maximum allowed is {limit // (1024 * 1024)}MB"
        super().__init__(limit, detail, code)


class TooManyRows(LimitExceeded):
    default_code = 'too_many_rows'

    def __init__(self, limit, detail=None, code=None):
        if detail is None:
            detail = f"Upload row limit exceeded. Maximum {limit} rows are allowed per import"
        super().__init__(limit, detail, code)


class InternalPersistenceError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'A storage error occurred. Please try again later.'
    default_code = 'persistence_error'


class EmailAlreadyInUse(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Email already in use'
    default_code = 'email_in_use'


class CannotArchiveSelf(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'You cannot archive your own admin account'
    default_code = 'cannot_archive_self'
