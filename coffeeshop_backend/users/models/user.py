"""
PATH: users/models/user.py

CUSTOM USER MODEL

Identity:
- email is the login identifier (SimpleJWT obtains tokens by email + password).
- username is optional and auto-derived from the email local-part.

Roles:
- Storefront shoppers are "customer" (owners of orders + loyalty profile).
- Everyone else (admin, manager, barista, cashier) is shop staff and can
  move orders through the status state machine.
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def _unique_username(self, email: str) -> str:
        base = (email.split("@")[0] or "user").strip().lower()
        candidate = base
        i = 1
        while self.model.objects.filter(username__iexact=candidate).exists():
            i += 1
            candidate = f"{base}{i}"
        return candidate

    def create_user(self, email=None, password=None, **extra_fields):
        """
        Rules:
        - email is required.
        - username defaults to the email local-part (uniqueness ensured).
        - staff roles imply is_staff unless the caller says otherwise.
        """
        email = (email or "").strip()
        if not email:
            raise ValueError("An email address is required")

        email = self.normalize_email(email)

        username = (extra_fields.get("username") or "").strip()
        extra_fields["username"] = username or self._unique_username(email)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault(
            "is_staff", extra_fields.get("role") in self.model.STAFF_ROLES
        )

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", self.model.ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_ADMIN = "admin"
    ROLE_MANAGER = "manager"
    ROLE_BARISTA = "barista"
    ROLE_CASHIER = "cashier"
    ROLE_CUSTOMER = "customer"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_BARISTA, "Barista"),
        (ROLE_CASHIER, "Cashier"),
        (ROLE_CUSTOMER, "Customer"),
    ]

    STAFF_ROLES = frozenset({ROLE_ADMIN, ROLE_MANAGER, ROLE_BARISTA, ROLE_CASHIER})

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_shop_staff(self) -> bool:
        return self.role in self.STAFF_ROLES

    def __str__(self):
        ident = self.username or self.email
        return f"{ident} ({self.role})"
