from rest_framework.throttling import UserRateThrottle


class SubmissionRateThrottle(UserRateThrottle):
    """Strict rate limit for exam submissions to prevent abuse."""
    scope = 'submission'


class ImportRateThrottle(UserRateThrottle):
    """Rate limit for question file uploads, which parse whole files in memory."""
    scope = 'import'
