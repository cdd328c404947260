"""
Readiness check covering both database connections.
"""

import logging

from django.db import connections
from django.db.utils import Error as DatabaseError
from django.http import JsonResponse
from django.views.decorators.cache import never_cache
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


def _ping(alias):
    try:
        with connections[alias].cursor() as cursor:
            cursor.execute("SELECT 1")
        return True
    except DatabaseError:
        logger.warning("Readiness check failed for database %s", alias, exc_info=True)
        return False


@csrf_exempt
@never_cache
def readiness_check(request):
    """Report whether the portal DB and the legacy registry are reachable."""
    databases = {alias: _ping(alias) for alias in ("default", "legacy")}
    ready = databases["default"]
    return JsonResponse(
        {"success": ready, "databases": databases},
        status=200 if ready else 503,
    )
