"""
URL configuration for vidgrab project.
"""

from django.urls import path

from downloads.views import download_view

urlpatterns = [
    # POST to download/convert, GET with ?taskId= for status
    path('api/download', download_view, name='download'),
]
