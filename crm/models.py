from django.conf import settings
from django.db import models


class SalesProfile(models.Model):
    """Links a login user to a role and a salesperson (SPP) code."""

    ROLE_ADMIN = "admin"
    ROLE_USER = "user"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_USER, "User"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        models.CASCADE,
        related_name="sales_profile",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_USER)
    spp_code = models.CharField(max_length=20, blank=True, null=True)
    full_name = models.CharField(max_length=255, blank=True, null=True)
    # id of the matching row in the backend ``profiles`` table
    backend_user_id = models.CharField(max_length=64, blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.user} ({self.spp_code or 'no SPP code'})"

    @property
    def is_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    class Meta:
        db_table = "sales_profiles"
