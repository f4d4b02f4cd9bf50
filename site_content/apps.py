from django.apps import AppConfig

class SiteContentConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'site_content'
    verbose_name = 'Site Content'
