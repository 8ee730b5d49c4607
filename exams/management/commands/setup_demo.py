"""
Management command to set up demo data for the exam preparation API.
Creates demo users and a featured exam with questions.
"""
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.contrib.auth.models import User
from django.utils import timezone
from rest_framework.authtoken.models import Token
from exams.models import Exam, UserProfile
from exams.services import QuestionImportService

DEMO_QUESTIONS = [
    {
        'question_text': 'What is the capital of Bangladesh?',
        'options': ['Chattogram', 'Dhaka', 'Khulna', 'Rajshahi'],
        'correct_option_index': 1,
        'explanation': 'Dhaka has been the capital since 1971.'
    },
    {
        'question_text': 'Which river is known as the Padma in Bangladesh?',
        'options': ['Brahmaputra', 'Meghna', 'Ganges', 'Teesta'],
        'correct_option_index': 2,
    },
    {
        'question_text': 'What is 15% of 200?',
        'options': ['20', '25', '30', '35'],
        'correct_option_index': 2,
        'explanation': '200 x 0.15 = 30'
    },
    {
        'question_text': 'Choose the synonym of "abundant".',
        'options': ['Scarce', 'Plentiful', 'Rare'],
        'correct_option_index': 1,
    },
]


class Command(BaseCommand):
    help = 'Set up demo data for testing'

    def _create_user(self, username, password, role, **extra):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={'email': f'{username}@example.com', 'is_active': True, **extra}
        )
        if created:
            user.set_password(password)
            user.save()
            user.profile.role = role
            user.profile.save()
            self.stdout.write(self.style.SUCCESS(f'✓ Created {role}: {username} / {password}'))
        else:
            self.stdout.write(f'  {username} user already exists')

        token, _ = Token.objects.get_or_create(user=user)
        return user, token

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('\nSetting up exam preparation demo data...\n'))

        student, student_token = self._create_user(
            'student', 'student123', UserProfile.Role.STUDENT,
            first_name='Test', last_name='Student'
        )
        admin, admin_token = self._create_user(
            'admin', 'admin123', UserProfile.Role.ADMIN,
            is_staff=True, is_superuser=True
        )

        exam, created = Exam.objects.get_or_create(
            title='BCS Preliminary Model Test',
            defaults={
                'category': Exam.Category.BCS,
                'total_marks': 100,
                'duration_minutes': 30,
                'exam_date': timezone.now() + timedelta(days=7),
                'is_featured': True
            }
        )

        if created:
            result = QuestionImportService.bulk_json_import(exam.pk, 'replace', DEMO_QUESTIONS)
            self.stdout.write(self.style.SUCCESS(
                f"✓ Exam: {exam.title} with {result['total_questions']} questions"
            ))
        else:
            self.stdout.write(f'  Exam already exists: {exam.title}')

        # Print summary
        self.stdout.write(self.style.SUCCESS('\n' + '='*60))
        self.stdout.write(self.style.SUCCESS('Demo Setup Complete!'))
        self.stdout.write(self.style.SUCCESS('='*60))

        self.stdout.write('\nDemo Accounts:')
        self.stdout.write('  Student:  student / student123')
        self.stdout.write('  Admin:    admin / admin123')

        self.stdout.write('\nAPI Tokens:')
        self.stdout.write(f'  Student:  {student_token.key}')
        self.stdout.write(f'  Admin:    {admin_token.key}')

        self.stdout.write('\nAPI Documentation:')
        self.stdout.write('  Swagger UI: http://localhost:8000/api/docs/')
        self.stdout.write('  ReDoc:      http://localhost:8000/api/redoc/')

        self.stdout.write('\nTry it:')
        self.stdout.write(f'  curl -X POST -H "Authorization: Token {student_token.key}" '
                          f'http://localhost:8000/api/exams/{exam.pk}/start/')
        self.stdout.write('')
