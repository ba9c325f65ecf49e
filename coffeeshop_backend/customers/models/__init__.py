from .profile import CustomerProfile

__all__ = [
    "CustomerProfile",
]
