"""
Root URL configuration for the Church Portal discipleship backend.
"""
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    return JsonResponse({"status": "healthy"})


urlpatterns = [
    path('api/discipleship/', include('discipleship.urls')),
    path('health', health_check),
]
