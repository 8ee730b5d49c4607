from django.db import models
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .soft_delete import SoftDeleteModel


class UserProfile(SoftDeleteModel):
    """
    Role and contact details for a user. Archiving a user soft-deletes the
    profile and deactivates the account, so its tokens stop authenticating.
    """
    class Role(models.TextChoices):
        STUDENT = 'student', 'Student'
        ADMIN = 'admin', 'Admin'

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT, db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(SoftDeleteModel.Meta):
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_deleted', 'role', 'created_at'], name='profile_alive_role_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"

    @property
    def is_student(self):
        return self.role == self.Role.STUDENT

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    def soft_delete(self, user=None):
        super().soft_delete(user)
        self.user.is_active = False
        self.user.save(update_fields=['is_active'])

    def restore(self):
        super().restore()
        self.user.is_active = True
        self.user.save(update_fields=['is_active'])


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    if created:
        UserProfile.objects.create(user=instance)
