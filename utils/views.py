import logging

from django.conf import settings
from django.views.decorators.http import require_POST

from members.decorators import login_required_json

from .api import api_view, success_response
from .exceptions import ValidationFailed
from .uploads import DEFAULT_UPLOAD_FOLDER, upload_files_with_concurrency_limit

logger = logging.getLogger(__name__)

ALLOWED_FOLDERS = {"address_documents", "membership_documents", "verification_documents"}


@require_POST
@login_required_json
@api_view
def upload_documents(request):
    files = request.FILES.getlist("files")
    if not files:
        raise ValidationFailed("กรุณาเลือกไฟล์ที่ต้องการอัปโหลด")

    folder = request.POST.get("folder") or DEFAULT_UPLOAD_FOLDER
    if folder not in ALLOWED_FOLDERS:
        raise ValidationFailed("โฟลเดอร์ปลายทางไม่ถูกต้อง")

    results = upload_files_with_concurrency_limit(
        files, folder=folder, max_concurrent=settings.UPLOAD_MAX_CONCURRENT
    )
    failed = [result for result in results if not result["success"]]
    if failed:
        logger.warning(
            "User %s: %d of %d uploads failed", request.user.pk, len(failed), len(results)
        )
    return success_response(results=results, failedCount=len(failed))
