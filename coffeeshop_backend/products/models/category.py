# products/models/category.py

import uuid

from django.db import models


class Category(models.Model):
    """
    Menu grouping (e.g. "Hot Coffee", "Iced Latte", "Pastries").

    The name doubles as the product "type" for coffee classification.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name
