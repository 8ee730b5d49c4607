from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .api.views import (
    # Core Resources
    ExamViewSet, ExamResultViewSet, QuestionBankViewSet, UserAdminViewSet,
    # Question Import
    BulkQuestionImportView, QuestionFileUploadView,
    QuestionUploadPreviewView, QuestionUploadCommitView,
    UploadHistoryListView, QuestionImportTemplateView,
)

# Router for ViewSets
router = DefaultRouter()
router.register(r'exams', ExamViewSet, basename='exam')
router.register(r'results', ExamResultViewSet, basename='result')
router.register(r'questions', QuestionBankViewSet, basename='question-bank')
router.register(r'users', UserAdminViewSet, basename='user')

urlpatterns = [
    # ============================================
    # QUESTION IMPORT
    # ============================================
    path('questions/bulk/', BulkQuestionImportView.as_view(), name='question-bulk-import'),
    path('questions/upload-file/', QuestionFileUploadView.as_view(), name='question-upload-file'),
    path('questions/upload-preview/', QuestionUploadPreviewView.as_view(), name='question-upload-preview'),
    path('questions/upload-commit/', QuestionUploadCommitView.as_view(), name='question-upload-commit'),
    path('questions/upload-history/', UploadHistoryListView.as_view(), name='question-upload-history'),
    path('questions/import-template/', QuestionImportTemplateView.as_view(), name='question-import-template'),

    # ============================================
    # CORE API ROUTES (ViewSets)
    # ============================================
    path('', include(router.urls)),
]
