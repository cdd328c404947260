from django.contrib.auth.models import AbstractUser
from django.db import models


#########################
# Member Model

# Extends Django's AbstractUser to represent a portal account.
# An account starts as a "default_user" and becomes a "member" once an
# application is approved and linked to a member code, or an existing
# member code is verified by an administrator.

# Fields:
# - role: default_user or member
# - phone: contact number given at sign-up
# - admin_level: 0 for ordinary accounts, 1-5 for portal administrators
#   (level 5 is the super admin who may manage other admins)


class Member(AbstractUser):
    ROLE_DEFAULT_USER = "default_user"
    ROLE_MEMBER = "member"
    ROLE_CHOICES = [
        (ROLE_DEFAULT_USER, "ผู้ใช้ทั่วไป"),
        (ROLE_MEMBER, "สมาชิก"),
    ]

    SUPER_ADMIN_LEVEL = 5

    role = models.CharField(
        max_length=20, choices=ROLE_CHOICES, default=ROLE_DEFAULT_USER
    )
    phone = models.CharField(max_length=30, blank=True)
    admin_level = models.PositiveSmallIntegerField(
        default=0, help_text="0 = not an admin; 1-5 = admin permission level"
    )

    class Meta:
        verbose_name = "Member account"
        verbose_name_plural = "Member accounts"

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        full_name = self.get_full_name().strip()
        return full_name or self.username

    @property
    def is_portal_admin(self):
        return self.is_active and (
            self.is_superuser or self.is_staff or self.admin_level > 0
        )

    @property
    def is_super_admin(self):
        return self.is_superuser or self.admin_level >= self.SUPER_ADMIN_LEVEL

    def promote_to_member(self):
        """Switch a default_user to member. Returns True when the role changed."""
        if self.role != self.ROLE_DEFAULT_USER:
            return False
        self.role = self.ROLE_MEMBER
        self.save(update_fields=["role"])
        return True
