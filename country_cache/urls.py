"""
URL configuration for the country_cache project.

All API routes live in the countries app; unmatched paths and crashes
outside DRF views get JSON bodies instead of Django's HTML pages.
"""
from django.urls import path, include
from django.http import JsonResponse

urlpatterns = [
    path('', include('countries.urls')),
]


def custom_404(request, exception):
    return JsonResponse({"error": "Endpoint not found, try /countries or /status"}, status=404)


def custom_500(request):
    return JsonResponse({"error": "Internal server error"}, status=500)


handler404 = "country_cache.urls.custom_404"
handler500 = "country_cache.urls.custom_500"
