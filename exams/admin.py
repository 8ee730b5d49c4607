from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import Exam, Question, QuestionBookmark, ExamResult, UploadHistory, UserProfile


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Profile'
    fields = ['role', 'phone', 'is_deleted', 'deleted_at', 'deleted_by']
    readonly_fields = ['is_deleted', 'deleted_at', 'deleted_by']

    def get_queryset(self, request):
        return UserProfile.all_objects.all()


class UserAdmin(BaseUserAdmin):
    inlines = [UserProfileInline]
    list_display = ['username', 'email', 'first_name', 'last_name', 'get_role', 'is_staff']
    list_filter = ['is_staff', 'is_superuser', 'is_active', 'profile__role']

    def get_role(self, obj):
        return obj.profile.get_role_display() if hasattr(obj, 'profile') else '-'
    get_role.short_description = 'Role'


admin.site.unregister(User)
admin.site.register(User, UserAdmin)


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 1
    fields = ['order', 'question_text', 'options', 'correct_option_index', 'explanation']


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'exam_date', 'duration_minutes', 'is_featured', 'enrolled_students', 'is_deleted']
    list_filter = ['category', 'is_featured', 'is_deleted']
    search_fields = ['title']
    inlines = [QuestionInline]
    readonly_fields = ['enrolled_students', 'created_at', 'updated_at', 'deleted_at', 'deleted_by']
    actions = ['soft_delete_selected', 'restore_selected']
    fieldsets = (
        (None, {'fields': ('title', 'category', 'exam_date', 'is_featured')}),
        ('Settings', {'fields': ('total_marks', 'duration_minutes', 'enrolled_students')}),
        ('Archive', {'fields': ('is_deleted', 'deleted_at', 'deleted_by'), 'classes': ('collapse',)}),
        ('Metadata', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def get_queryset(self, request):
        # Admins see archived exams too so they can restore them here.
        return Exam.all_objects.all()

    @admin.action(description='Soft delete selected exams')
    def soft_delete_selected(self, request, queryset):
        updated = queryset.alive().soft_delete(request.user)
        self.message_user(request, f"{updated} exam(s) deleted.")

    @admin.action(description='Restore selected exams')
    def restore_selected(self, request, queryset):
        updated = queryset.deleted().restore()
        self.message_user(request, f"{updated} exam(s) restored.")


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['id', 'exam', 'text_preview', 'correct_option_index', 'order']
    list_filter = ['exam']
    search_fields = ['question_text']

    def text_preview(self, obj):
        return obj.question_text[:50] + '...' if len(obj.question_text) > 50 else obj.question_text
    text_preview.short_description = 'Question'


@admin.register(ExamResult)
class ExamResultAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'exam', 'status', 'score', 'percentage', 'time_taken_seconds', 'submitted_at']
    list_filter = ['status', 'exam']
    search_fields = ['user__username', 'exam__title']
    readonly_fields = ['started_at', 'submitted_at', 'answers', 'created_at', 'updated_at']
    fieldsets = (
        (None, {'fields': ('user', 'exam', 'status')}),
        ('Results', {'fields': ('total_questions', 'attempted_questions', 'correct_answers', 'score', 'percentage', 'answers')}),
        ('Timestamps', {'fields': ('started_at', 'submitted_at', 'time_taken_seconds', 'created_at', 'updated_at'), 'classes': ('collapse',)}),
    )


@admin.register(UploadHistory)
class UploadHistoryAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'file_name', 'exam', 'uploader', 'mode', 'duplicate_handling', 'imported_count', 'total_rows']
    list_filter = ['mode', 'duplicate_handling', 'created_at']
    search_fields = ['file_name', 'uploader__username', 'exam__title']
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(QuestionBookmark)
class QuestionBookmarkAdmin(admin.ModelAdmin):
    list_display = ['user', 'question', 'created_at']
    search_fields = ['user__username', 'question__question_text']
    raw_id_fields = ['user', 'question']
