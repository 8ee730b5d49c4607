from rest_framework import serializers
from django.contrib.auth.models import User
from drf_spectacular.utils import extend_schema_field
from exams.exceptions import EmailAlreadyInUse
from exams.models import Exam, Question, QuestionBookmark, ExamResult, UploadHistory, UserProfile


class UserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source='profile.role', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'role']
        read_only_fields = fields


class QuestionSerializer(serializers.ModelSerializer):
    """Full question including the answer key (admins only)."""

    class Meta:
        model = Question
        fields = [
            'id', 'exam', 'question_text', 'options', 'correct_option_index',
            'explanation', 'order', 'created_at'
        ]
        read_only_fields = fields


class QuestionPublicSerializer(serializers.ModelSerializer):
    """Question as shown to a student taking the exam: no answer key."""

    class Meta:
        model = Question
        fields = ['id', 'question_text', 'options', 'order']


class ExamListSerializer(serializers.ModelSerializer):
    question_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'category', 'total_marks', 'duration_minutes',
            'exam_date', 'is_featured', 'enrolled_students', 'question_count',
            'is_deleted', 'created_at'
        ]


class ExamDetailSerializer(serializers.ModelSerializer):
    question_count = serializers.IntegerField(read_only=True)
    deleted_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'category', 'total_marks', 'duration_minutes',
            'exam_date', 'is_featured', 'enrolled_students', 'question_count',
            'is_deleted', 'deleted_at', 'deleted_by', 'created_at', 'updated_at'
        ]


class ExamWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating exams - only writable fields."""

    class Meta:
        model = Exam
        fields = [
            'title', 'category', 'total_marks', 'duration_minutes',
            'exam_date', 'is_featured'
        ]

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title cannot be blank.")
        return value


class AttemptAnswerSerializer(serializers.Serializer):
    # Kept as a string: ids that match no question are dropped, not rejected.
    question_id = serializers.CharField()
    # Out-of-range indexes are graded incorrect rather than rejected.
    selected_option_index = serializers.IntegerField()


class SubmitAttemptSerializer(serializers.Serializer):
    answers = AttemptAnswerSerializer(many=True, required=False, default=list)


class AttemptStartedSerializer(serializers.ModelSerializer):
    result_id = serializers.IntegerField(source='id', read_only=True)

    class Meta:
        model = ExamResult
        fields = ['result_id', 'exam', 'status', 'started_at', 'total_questions']
        read_only_fields = fields


class AttemptSubmittedSerializer(serializers.ModelSerializer):
    result_id = serializers.IntegerField(source='id', read_only=True)
    exam_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = ExamResult
        fields = [
            'result_id', 'exam_id', 'status', 'total_questions', 'attempted_questions',
            'correct_answers', 'score', 'percentage', 'time_taken_seconds', 'submitted_at'
        ]
        read_only_fields = fields


class ExamResultListSerializer(serializers.ModelSerializer):
    exam_title = serializers.CharField(source='exam.title', read_only=True)
    exam_category = serializers.CharField(source='exam.category', read_only=True)

    class Meta:
        model = ExamResult
        fields = [
            'id', 'exam', 'exam_title', 'exam_category', 'status',
            'total_questions', 'attempted_questions', 'correct_answers',
            'score', 'percentage', 'time_taken_seconds', 'started_at', 'submitted_at'
        ]


class ExamResultDetailSerializer(ExamResultListSerializer):
    breakdown = serializers.SerializerMethodField()

    class Meta(ExamResultListSerializer.Meta):
        fields = ExamResultListSerializer.Meta.fields + ['breakdown']

    @extend_schema_field(serializers.ListField(child=serializers.DictField()))
    def get_breakdown(self, obj) -> list:
        """Every exam question with the answer given (if any) and the key."""
        given = {str(answer['question_id']): answer for answer in obj.answers or []}
        breakdown = []
        for question in obj.exam.questions.all():
            answer = given.get(str(question.pk))
            breakdown.append({
                'question_id': question.pk,
                'question_text': question.question_text,
                'options': question.options,
                'selected_option_index': answer['selected_option_index'] if answer else None,
                'correct_option_index': question.correct_option_index,
                'is_correct': answer['is_correct'] if answer else False,
                'explanation': question.explanation,
            })
        return breakdown


# Question Import Serializers
class BulkQuestionImportSerializer(serializers.Serializer):
    exam_id = serializers.IntegerField()
    mode = serializers.CharField(required=False, allow_blank=True, default='append')
    # Shape is checked row by row during normalization so errors carry row numbers.
    questions = serializers.JSONField()


class QuestionUploadPreviewSerializer(serializers.Serializer):
    file = serializers.FileField(allow_empty_file=True, help_text="CSV or JSON file containing questions")
    exam_id = serializers.IntegerField()
    mode = serializers.CharField(required=False, allow_blank=True, default='append')


class QuestionFileUploadSerializer(QuestionUploadPreviewSerializer):
    duplicate_handling = serializers.CharField(required=False, allow_blank=True, default='skip')


class QuestionUploadCommitSerializer(serializers.Serializer):
    preview_id = serializers.CharField(allow_blank=True)
    duplicate_handling = serializers.CharField(required=False, allow_blank=True, default='skip')


class UploadHistorySerializer(serializers.ModelSerializer):
    exam_title = serializers.CharField(source='exam.title', read_only=True)
    uploader_username = serializers.CharField(source='uploader.username', read_only=True, default=None)

    class Meta:
        model = UploadHistory
        fields = [
            'id', 'exam', 'exam_title', 'uploader', 'uploader_username', 'file_name',
            'mode', 'duplicate_handling', 'total_rows', 'imported_count',
            'skipped_duplicate_count', 'duplicate_within_file_count',
            'duplicate_existing_count', 'preview_id', 'created_at'
        ]
        read_only_fields = fields


# Question Bank Serializers
class QuestionBankSerializer(serializers.ModelSerializer):
    """Question as listed in the bank: exam context, no answer key."""
    exam_id = serializers.IntegerField(read_only=True)
    exam_title = serializers.CharField(source='exam.title', read_only=True)
    category = serializers.CharField(source='exam.category', read_only=True)

    class Meta:
        model = Question
        fields = ['id', 'exam_id', 'exam_title', 'category', 'question_text', 'options', 'explanation']
        read_only_fields = fields


class QuestionBookmarkSerializer(serializers.ModelSerializer):
    exam_id = serializers.IntegerField(source='question.exam_id', read_only=True)

    class Meta:
        model = QuestionBookmark
        fields = ['id', 'question_id', 'exam_id', 'created_at']
        read_only_fields = fields


class BookmarkedQuestionSerializer(serializers.ModelSerializer):
    bookmark_id = serializers.IntegerField(source='id', read_only=True)
    bookmarked_at = serializers.DateTimeField(source='created_at', read_only=True)
    question = QuestionBankSerializer(read_only=True)

    class Meta:
        model = QuestionBookmark
        fields = ['bookmark_id', 'bookmarked_at', 'question']
        read_only_fields = fields


# User Administration Serializers
class AdminUserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source='profile.role', read_only=True)
    phone = serializers.CharField(source='profile.phone', read_only=True)
    is_deleted = serializers.BooleanField(source='profile.is_deleted', read_only=True)
    deleted_at = serializers.DateTimeField(source='profile.deleted_at', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'role', 'phone',
            'is_active', 'is_deleted', 'deleted_at', 'date_joined'
        ]
        read_only_fields = fields


class AdminUserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserProfile.Role.choices, required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_email(self, value):
        value = value.strip().lower()
        if value and User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise EmailAlreadyInUse()
        return value

    def update(self, instance, validated_data):
        for field in ['email', 'first_name', 'last_name']:
            if field in validated_data:
                setattr(instance, field, validated_data[field])
        instance.save()

        profile = instance.profile
        for field in ['role', 'phone']:
            if field in validated_data:
                setattr(profile, field, validated_data[field])
        profile.save()
        return instance
