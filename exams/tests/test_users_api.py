"""
Tests for admin user management: listing, profile edits, archive and restore.
"""
from django.contrib.auth.models import User
from django.core.cache import cache
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from exams.models import UserProfile


class UserAdminApiTests(APITestCase):

    def setUp(self):
        cache.clear()

        self.admin = User.objects.create_user('admin', 'admin@test.com', 'pass123')
        self.admin.profile.role = UserProfile.Role.ADMIN
        self.admin.profile.save()
        self.admin_token = Token.objects.create(user=self.admin)

        self.student = User.objects.create_user(
            'rahim', 'rahim@test.com', 'pass123', first_name='Rahim'
        )
        self.student_token = Token.objects.create(user=self.student)

        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.admin_token.key}')

    def usernames(self, response):
        return sorted(user['username'] for user in response.data['results'])

    def test_students_are_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.student_token.key}')
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.usernames(response), ['admin', 'rahim'])

        response = self.client.get('/api/users/', {'role': 'student'})
        self.assertEqual(self.usernames(response), ['rahim'])

        response = self.client.get('/api/users/', {'search': 'rahim@'})
        self.assertEqual(self.usernames(response), ['rahim'])

    def test_retrieve(self):
        response = self.client.get(f'/api/users/{self.student.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'student')
        self.assertTrue(response.data['is_active'])
        self.assertFalse(response.data['is_deleted'])

        response = self.client.get('/api/users/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'user_not_found')

    def test_update_profile_fields(self):
        response = self.client.patch(f'/api/users/{self.student.pk}/', {
            'email': ' Rahim.New@Test.com ', 'role': 'admin', 'phone': '01700000000'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'rahim.new@test.com')
        self.assertEqual(response.data['role'], 'admin')
        self.assertEqual(response.data['first_name'], 'Rahim')

        profile = UserProfile.objects.get(user=self.student)
        self.assertEqual(profile.role, UserProfile.Role.ADMIN)
        self.assertEqual(profile.phone, '01700000000')

    def test_update_rejects_taken_email_and_unknown_role(self):
        response = self.client.patch(f'/api/users/{self.student.pk}/', {'email': 'ADMIN@test.com'})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'email_in_use')

        response = self.client.patch(f'/api/users/{self.student.pk}/', {'role': 'superuser'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.student.refresh_from_db()
        self.assertEqual(self.student.email, 'rahim@test.com')

    def test_archive_and_restore(self):
        response = self.client.delete(f'/api/users/{self.student.pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        self.student.refresh_from_db()
        self.assertFalse(self.student.is_active)
        profile = UserProfile.all_objects.get(user=self.student)
        self.assertTrue(profile.is_deleted)
        self.assertEqual(profile.deleted_by, self.admin)
        self.assertFalse(UserProfile.objects.filter(user=self.student).exists())

        response = self.client.get('/api/users/')
        self.assertEqual(self.usernames(response), ['admin'])
        response = self.client.get('/api/users/', {'record_status': 'deleted'})
        self.assertEqual(self.usernames(response), ['rahim'])
        response = self.client.get('/api/users/', {'record_status': 'all'})
        self.assertEqual(self.usernames(response), ['admin', 'rahim'])

        response = self.client.get(f'/api/users/{self.student.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(f'/api/users/{self.student.pk}/restore/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_active'])
        self.assertFalse(response.data['is_deleted'])
        self.assertIsNone(response.data['deleted_at'])

        self.student.refresh_from_db()
        self.assertTrue(self.student.is_active)

    def test_archived_user_token_stops_working(self):
        self.client.delete(f'/api/users/{self.student.pk}/')

        self.client.credentials(HTTP_AUTHORIZATION=f'Token {self.student_token.key}')
        response = self.client.get('/api/exams/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_cannot_archive_self(self):
        response = self.client.delete(f'/api/users/{self.admin.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'cannot_archive_self')
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_active)

    def test_restore_requires_archived_user(self):
        response = self.client.post(f'/api/users/{self.student.pk}/restore/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'user_not_found')
