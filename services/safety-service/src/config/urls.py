# services/safety-service/src/config/urls.py
"""
URL configuration for Safety Service
"""

from django.conf import settings
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from common.health import HealthStatus, check_cache, check_database, overall_status


def health_check(request):
    return JsonResponse({'status': 'ok', 'service': settings.SERVICE_NAME})


def readiness_check(request):
    checks = [check_database(), check_cache()]
    result = overall_status(checks)
    status_code = 200 if result == HealthStatus.HEALTHY else 503
    return JsonResponse(
        {
            'status': 'ready' if status_code == 200 else 'not_ready',
            'service': settings.SERVICE_NAME,
            'checks': checks,
        },
        status=status_code
    )


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health_check'),
    path('ready/', readiness_check, name='readiness_check'),
    path('api/v1/safety/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/v1/safety/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/v1/safety/', include('apps.api.urls', namespace='api')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    urlpatterns += [path('__debug__/', include('debug_toolbar.urls'))]
