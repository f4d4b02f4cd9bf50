from django.db import models


class ContentSection(models.Model):
    """
    One row per content type. The "document" row holds the whole serialized
    site document and is the only row read back; the per-section rows are
    replicas for independent inspection. ``updated_at`` only moves when a
    row's content actually changes.
    """
    DOCUMENT = "document"

    content_type = models.CharField(max_length=100, unique=True, db_index=True)
    content_data = models.JSONField(default=dict)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["content_type"]
        verbose_name = "Content Section"
        verbose_name_plural = "Content Sections"

    def __str__(self):
        return self.content_type
