# users/permissions.py

from rest_framework.permissions import BasePermission

from users.models import User


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Base permission to check user role safely.
    """

    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and getattr(user, "role", None) in self.allowed_roles
        )


# ---------------- ROLE PERMISSIONS ----------------
class IsStaff(HasRole):
    """
    Any shop staff member:
    - admin
    - manager
    - barista
    - cashier
    """

    allowed_roles = set(User.STAFF_ROLES)


class IsCustomer(HasRole):
    allowed_roles = {User.ROLE_CUSTOMER}


class IsStaffOrOrderOwner(BasePermission):
    """
    Staff see every order; a customer only sees orders placed on their account.
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if getattr(user, "role", None) in User.STAFF_ROLES:
            return True
        return obj.customer_id is not None and obj.customer_id == user.id
