"""
URL configuration for backend project.
"""
from django.urls import path, include

urlpatterns = [
    # Site content API
    path('api/', include('site_content.urls')),
]
