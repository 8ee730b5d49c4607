"""
API Views for the exam preparation platform.
Provides endpoints for exams, attempts, results, the question bank,
question imports and user administration.
"""
import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.db.models import Count
from django.http import HttpResponse
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import (
    extend_schema, extend_schema_view, OpenApiParameter,
    OpenApiExample, OpenApiResponse
)

from exams.exceptions import CannotArchiveSelf, ExamNotFound, FileTooLarge, ResultNotFound, UserNotFound
from exams.models import Exam, ExamResult, UploadHistory
from exams.permissions import IsAdminOrReadOnly, IsAdminUser, IsOwnerOrAdmin, is_admin
from exams.throttling import ImportRateThrottle, SubmissionRateThrottle
from exams.services import (
    ExamAttemptService, LeaderboardService, QuestionBankService, QuestionImportService
)
from .serializers import (
    ExamListSerializer, ExamDetailSerializer, ExamWriteSerializer,
    QuestionSerializer, QuestionPublicSerializer,
    SubmitAttemptSerializer, AttemptStartedSerializer, AttemptSubmittedSerializer,
    ExamResultListSerializer, ExamResultDetailSerializer,
    BulkQuestionImportSerializer, QuestionUploadPreviewSerializer,
    QuestionFileUploadSerializer, QuestionUploadCommitSerializer,
    UploadHistorySerializer,
    QuestionBankSerializer, QuestionBookmarkSerializer, BookmarkedQuestionSerializer,
    AdminUserSerializer, AdminUserUpdateSerializer
)

logger = logging.getLogger(__name__)


def _read_upload(uploaded_file):
    """Read an uploaded file, refusing oversized files before loading them."""
    max_size = settings.QUESTION_IMPORT['MAX_FILE_SIZE_BYTES']
    if uploaded_file.size is not None and uploaded_file.size > max_size:
        raise FileTooLarge(max_size)
    return uploaded_file.read()


# =============================================================================
# EXAMS
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        summary="List exams",
        description="""
Returns a paginated list of active exams.

**Admins** may pass `record_status=deleted` or `record_status=all` to include
soft-deleted exams.
""",
        parameters=[
            OpenApiParameter(
                name='record_status', type=str, location='query',
                enum=['active', 'deleted', 'all'], description='Admins only'
            )
        ]
    ),
    retrieve=extend_schema(summary="Get exam details"),
    create=extend_schema(
        summary="Create exam",
        description="**Requires Admin role.**",
        examples=[
            OpenApiExample(
                'Request Example',
                value={
                    "title": "BCS Preliminary Model Test 1",
                    "category": "BCS",
                    "total_marks": 200,
                    "duration_minutes": 120,
                    "exam_date": "2026-11-20T09:00:00Z",
                    "is_featured": True
                },
                request_only=True
            )
        ]
    ),
    destroy=extend_schema(
        summary="Delete exam",
        description="Soft delete: the exam disappears from listings and can be restored."
    )
)
@extend_schema(tags=['Exams'])
class ExamViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing exams and taking them.

    Students browse exams, start an attempt and submit answers; admins manage
    the exam catalogue.
    """
    permission_classes = [IsAuthenticated, IsAdminOrReadOnly]
    lookup_value_regex = r'\d+'
    filterset_fields = ['category', 'is_featured']
    search_fields = ['title']
    ordering_fields = ['title', 'created_at', 'exam_date', 'enrolled_students']

    def get_queryset(self):
        queryset = Exam.objects.all()
        if is_admin(self.request.user):
            record_status = self.request.query_params.get('record_status', 'active')
            if record_status == 'deleted':
                queryset = Exam.all_objects.deleted()
            elif record_status == 'all':
                queryset = Exam.all_objects.all()
        return queryset.annotate(question_count=Count('questions')).order_by('-created_at')

    def get_serializer_class(self):
        if self.action in ['list', 'featured']:
            return ExamListSerializer
        if self.action in ['create', 'update', 'partial_update']:
            return ExamWriteSerializer
        return ExamDetailSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exam = serializer.save()
        exam.question_count = 0
        logger.info(f"Exam {exam.pk} created by {request.user.username}")
        return Response(ExamDetailSerializer(exam).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        exam = serializer.save()
        exam.question_count = exam.get_question_count()
        logger.info(f"Exam {exam.pk} updated by {request.user.username}")
        return Response(ExamDetailSerializer(exam).data)

    def perform_destroy(self, instance):
        instance.soft_delete(self.request.user)
        logger.info(f"Exam {instance.pk} soft-deleted by {self.request.user.username}")

    @extend_schema(
        summary="Restore deleted exam",
        request=None,
        responses={200: ExamDetailSerializer, 404: OpenApiResponse(description="Exam not found")}
    )
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, IsAdminUser])
    def restore(self, request, pk=None):
        exam = Exam.all_objects.filter(pk=pk).first()
        if exam is None:
            raise ExamNotFound()
        if exam.is_deleted:
            exam.restore()
            logger.info(f"Exam {exam.pk} restored by {request.user.username}")
        exam.question_count = exam.get_question_count()
        return Response(ExamDetailSerializer(exam).data)

    @extend_schema(summary="Featured exams", responses={200: ExamListSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def featured(self, request):
        exams = Exam.objects.filter(is_featured=True).annotate(
            question_count=Count('questions')
        ).order_by('exam_date')[:10]
        return Response(ExamListSerializer(exams, many=True).data)

    @extend_schema(
        summary="List exam questions",
        description="Students receive questions without the answer key; admins see everything.",
        responses={200: QuestionPublicSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def questions(self, request, pk=None):
        exam = self.get_object()
        serializer_class = QuestionSerializer if is_admin(request.user) else QuestionPublicSerializer
        return Response(serializer_class(exam.questions.all(), many=True).data)

    @extend_schema(
        summary="Start exam attempt",
        description="""
Open an attempt for the current user.

Starting again while an attempt is in progress returns that attempt
unchanged (**200**) instead of creating a new one (**201**).
""",
        request=None,
        responses={
            201: AttemptStartedSerializer,
            200: AttemptStartedSerializer,
            404: OpenApiResponse(description="Exam not found")
        }
    )
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def start(self, request, pk=None):
        result, created = ExamAttemptService.start(pk, request.user)
        return Response(
            AttemptStartedSerializer(result).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(
        summary="Submit exam answers",
        description="""
Grade and close the current attempt.

Answers that reference questions outside this exam are ignored. There is no
deadline: late submissions are graded normally.
""",
        request=SubmitAttemptSerializer,
        responses={
            200: AttemptSubmittedSerializer,
            400: OpenApiResponse(description="No active exam session"),
            404: OpenApiResponse(description="Exam not found")
        },
        examples=[
            OpenApiExample(
                'Request Example',
                value={
                    "answers": [
                        {"question_id": 1, "selected_option_index": 2},
                        {"question_id": 2, "selected_option_index": 0}
                    ]
                },
                request_only=True
            )
        ]
    )
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated], throttle_classes=[SubmissionRateThrottle])
    def submit(self, request, pk=None):
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ExamAttemptService.submit(pk, request.user, serializer.validated_data['answers'])
        return Response(AttemptSubmittedSerializer(result).data)

    @extend_schema(
        summary="Exam leaderboard",
        description="Top 50 submitted results: highest score first, then fastest, then earliest.",
        responses={200: dict}
    )
    @action(detail=True, methods=['get'])
    def leaderboard(self, request, pk=None):
        return Response(LeaderboardService.get_exam_leaderboard(pk))


# =============================================================================
# RESULTS
# =============================================================================

@extend_schema_view(
    list=extend_schema(summary="List my results", description="Submitted results of the current user."),
    retrieve=extend_schema(
        summary="Get result details",
        description="Includes a per-question breakdown with the correct answer and explanation."
    )
)
@extend_schema(tags=['Results'])
class ExamResultViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ExamResult.objects.none()
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]
    lookup_value_regex = r'\d+'
    filterset_fields = ['exam']
    ordering_fields = ['submitted_at', 'score']

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return ExamResult.objects.none()

        return ExamResult.objects.filter(
            user=self.request.user,
            status=ExamResult.Status.SUBMITTED
        ).select_related('exam').order_by('-submitted_at')

    def get_object(self):
        result = self.get_queryset().filter(pk=self.kwargs[self.lookup_field]).first()
        if result is None:
            raise ResultNotFound()
        self.check_object_permissions(self.request, result)
        return result

    def get_serializer_class(self):
        if self.action == 'list':
            return ExamResultListSerializer
        return ExamResultDetailSerializer


# =============================================================================
# QUESTION BANK
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        summary="Search question bank",
        description="Questions of all active exams, without the answer key.",
        parameters=[
            OpenApiParameter(name='category', type=str, location='query', description='Exam category'),
            OpenApiParameter(name='exam', type=int, location='query', description='Exam id'),
            OpenApiParameter(name='q', type=str, location='query', description='Text contained in the question'),
        ]
    ),
    retrieve=extend_schema(summary="Get question")
)
@extend_schema(tags=['Question Bank'])
class QuestionBankViewSet(viewsets.ReadOnlyModelViewSet):
    """Browse, sample and bookmark questions for practice."""
    permission_classes = [IsAuthenticated]
    serializer_class = QuestionBankSerializer
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        params = self.request.query_params
        return QuestionBankService.search(
            category=params.get('category'),
            exam_id=params.get('exam'),
            text=params.get('q')
        )

    def get_object(self):
        return QuestionBankService.get_question(self.kwargs[self.lookup_field])

    @extend_schema(
        summary="Random practice questions",
        parameters=[
            OpenApiParameter(name='count', type=int, location='query', description='1-50, default 10'),
            OpenApiParameter(name='category', type=str, location='query'),
            OpenApiParameter(name='exam', type=int, location='query'),
        ],
        responses={200: dict}
    )
    @action(detail=False, methods=['get'])
    def random(self, request):
        params = request.query_params
        questions = QuestionBankService.random_sample(
            count=params.get('count'),
            category=params.get('category'),
            exam_id=params.get('exam')
        )
        return Response({
            'count': len(questions),
            'questions': QuestionBankSerializer(questions, many=True).data
        })

    @extend_schema(
        summary="Bookmark or unbookmark a question",
        request=None,
        responses={
            201: QuestionBookmarkSerializer,
            204: OpenApiResponse(description="Bookmark removed"),
            404: OpenApiResponse(description="Question or bookmark not found")
        }
    )
    @action(detail=True, methods=['post', 'delete'])
    def bookmark(self, request, pk=None):
        if request.method == 'DELETE':
            QuestionBankService.remove_bookmark(request.user, pk)
            return Response(status=status.HTTP_204_NO_CONTENT)

        bookmark, _ = QuestionBankService.add_bookmark(request.user, pk)
        return Response(QuestionBookmarkSerializer(bookmark).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="My bookmarked questions", responses={200: BookmarkedQuestionSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def bookmarks(self, request):
        queryset = QuestionBankService.bookmarks(request.user)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(BookmarkedQuestionSerializer(page, many=True).data)
        return Response(BookmarkedQuestionSerializer(queryset, many=True).data)


# =============================================================================
# USER ADMINISTRATION
# =============================================================================

@extend_schema_view(
    list=extend_schema(
        summary="List users",
        parameters=[
            OpenApiParameter(
                name='record_status', type=str, location='query',
                enum=['active', 'deleted', 'all'], description='Default active'
            ),
            OpenApiParameter(name='role', type=str, location='query', enum=['student', 'admin']),
        ]
    ),
    retrieve=extend_schema(summary="Get user"),
    partial_update=extend_schema(summary="Update user", request=AdminUserUpdateSerializer),
    update=extend_schema(summary="Update user", request=AdminUserUpdateSerializer),
    destroy=extend_schema(
        summary="Archive user",
        description="Soft delete: the account is deactivated and can be restored."
    )
)
@extend_schema(tags=['Users'])
class UserAdminViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin,
                       mixins.UpdateModelMixin, mixins.DestroyModelMixin,
                       viewsets.GenericViewSet):
    """Admin management of user accounts."""
    permission_classes = [IsAuthenticated, IsAdminUser]
    lookup_value_regex = r'\d+'
    search_fields = ['username', 'email', 'first_name', 'last_name', 'profile__phone']

    def get_queryset(self):
        queryset = User.objects.select_related('profile').order_by('-date_joined', '-id')
        params = self.request.query_params

        record_status = params.get('record_status', 'active')
        if record_status == 'deleted':
            queryset = queryset.filter(profile__is_deleted=True)
        elif record_status != 'all':
            queryset = queryset.filter(profile__is_deleted=False)

        role = params.get('role')
        if role:
            queryset = queryset.filter(profile__role=role)
        return queryset

    def get_serializer_class(self):
        if self.action in ['update', 'partial_update']:
            return AdminUserUpdateSerializer
        return AdminUserSerializer

    def get_object(self):
        user = self.get_queryset().filter(pk=self.kwargs[self.lookup_field]).first()
        if user is None:
            raise UserNotFound()
        return user

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"User {user.pk} updated by {request.user.username}")
        return Response(AdminUserSerializer(user).data)

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise CannotArchiveSelf()
        instance.profile.soft_delete(self.request.user)
        logger.info(f"User {instance.pk} archived by {self.request.user.username}")

    @extend_schema(
        summary="Restore archived user",
        request=None,
        responses={200: AdminUserSerializer, 404: OpenApiResponse(description="No archived user with this id")}
    )
    @action(detail=True, methods=['post'])
    def restore(self, request, pk=None):
        user = User.objects.select_related('profile').filter(pk=pk, profile__is_deleted=True).first()
        if user is None:
            raise UserNotFound()
        user.profile.restore()
        logger.info(f"User {user.pk} restored by {request.user.username}")
        return Response(AdminUserSerializer(user).data)


# =============================================================================
# QUESTION IMPORT
# =============================================================================

@extend_schema(tags=['Question Import'])
class BulkQuestionImportView(APIView):
    """Import questions posted as a JSON array."""
    permission_classes = [IsAuthenticated, IsAdminUser]

    @extend_schema(
        summary="Bulk import questions (JSON body)",
        description="Validates every question and writes them in one transaction. No duplicate analysis.",
        request=BulkQuestionImportSerializer,
        responses={201: dict, 400: dict, 404: dict},
        examples=[
            OpenApiExample(
                'Request Example',
                value={
                    "exam_id": 1,
                    "mode": "append",
                    "questions": [
                        {"question_text": "2 + 2 = ?", "options": ["3", "4"], "correct_option_index": 1}
                    ]
                },
                request_only=True
            )
        ]
    )
    def post(self, request):
        serializer = BulkQuestionImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = QuestionImportService.bulk_json_import(data['exam_id'], data['mode'], data['questions'])
        return Response(result, status=status.HTTP_201_CREATED)


@extend_schema(tags=['Question Import'])
class QuestionFileUploadView(APIView):
    """Parse, analyze and import a question file in one step."""
    permission_classes = [IsAuthenticated, IsAdminUser]
    parser_classes = [MultiPartParser, FormParser]
    throttle_classes = [ImportRateThrottle]

    @extend_schema(
        summary="Import questions from file",
        description="""
Upload a CSV or JSON file and import it immediately.

**CSV Format:**
```
questionText,options,correctOptionIndex,explanation
What is 2+2?,3|4|5|6,1,Basic addition
```

**JSON Format:**
```json
{"questions": [{"questionText": "What is 2+2?", "options": ["3","4"], "correctOptionIndex": 1}]}
```
""",
        request={'multipart/form-data': QuestionFileUploadSerializer},
        responses={201: dict, 400: dict, 404: dict}
    )
    def post(self, request):
        serializer = QuestionFileUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        uploaded_file = data['file']

        result = QuestionImportService.direct_file_import(
            exam_id=data['exam_id'],
            mode=data['mode'],
            content=_read_upload(uploaded_file),
            file_name=uploaded_file.name,
            mime_type=uploaded_file.content_type,
            uploader=request.user,
            duplicate_handling=data['duplicate_handling']
        )
        return Response(result, status=status.HTTP_201_CREATED)


@extend_schema(tags=['Question Import'])
class QuestionUploadPreviewView(APIView):
    """First phase of a reviewed import: analyze the file and hold it for commit."""
    permission_classes = [IsAuthenticated, IsAdminUser]
    parser_classes = [MultiPartParser, FormParser]
    throttle_classes = [ImportRateThrottle]

    @extend_schema(
        summary="Preview question file import",
        description="Nothing is written to the exam. The returned `preview_id` is valid for 15 minutes.",
        request={'multipart/form-data': QuestionUploadPreviewSerializer},
        responses={200: dict, 400: dict, 404: dict}
    )
    def post(self, request):
        serializer = QuestionUploadPreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        uploaded_file = data['file']

        result = QuestionImportService.preview_import(
            exam_id=data['exam_id'],
            mode=data['mode'],
            content=_read_upload(uploaded_file),
            file_name=uploaded_file.name,
            mime_type=uploaded_file.content_type,
            admin=request.user
        )
        return Response(result)


@extend_schema(tags=['Question Import'])
class QuestionUploadCommitView(APIView):
    """Second phase of a reviewed import."""
    permission_classes = [IsAuthenticated, IsAdminUser]

    @extend_schema(
        summary="Commit previewed import",
        request=QuestionUploadCommitSerializer,
        responses={
            201: dict,
            403: OpenApiResponse(description="Preview belongs to another admin"),
            404: OpenApiResponse(description="Preview not found or expired")
        }
    )
    def post(self, request):
        serializer = QuestionUploadCommitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = QuestionImportService.commit_import(
            preview_id=data['preview_id'],
            duplicate_handling=data['duplicate_handling'],
            admin=request.user
        )
        return Response(result, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        summary="Upload history",
        parameters=[OpenApiParameter(name='exam_id', type=int, location='query', description='Filter by exam')]
    )
)
@extend_schema(tags=['Question Import'])
class UploadHistoryListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = UploadHistorySerializer

    def get_queryset(self):
        queryset = UploadHistory.objects.select_related('exam', 'uploader').order_by('-created_at')
        exam_id = self.request.query_params.get('exam_id')
        if exam_id and exam_id.isdigit():
            queryset = queryset.filter(exam_id=exam_id)
        return queryset


@extend_schema(tags=['Question Import'])
class QuestionImportTemplateView(APIView):
    """Get import templates."""
    permission_classes = [IsAuthenticated, IsAdminUser]

    @extend_schema(
        summary="Get import template",
        parameters=[OpenApiParameter(name='template_format', type=str, location='query', enum=['csv', 'json'], description='Template file format (default csv)')],
        responses={200: dict}
    )
    def get(self, request):
        format_type = request.query_params.get('template_format', 'csv').strip().lower()

        if format_type == 'json':
            content = QuestionImportService.get_json_template()
            return Response({'template': content, 'format': 'json'})

        content = QuestionImportService.get_csv_template()
        response = HttpResponse(content, content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="question_import_template.csv"'
        return response
