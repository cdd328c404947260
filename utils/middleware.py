"""
Custom middleware for health checks.
"""

from django.http import HttpResponse

HEALTH_PATHS = ("/health/", "/api/health")


class HealthCheckMiddleware:
    """
    Answer load balancer probes before session, CSRF or host checks run.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path in HEALTH_PATHS:
            return HttpResponse("OK", content_type="text/plain")
        return self.get_response(request)
