import logging

from django.contrib.auth import authenticate, get_user_model, login, logout
from django.views.decorators.csrf import csrf_exempt, ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST

from activity.services import log_user_action
from utils.api import api_view, error_response, json_body, success_response

from .decorators import login_required_json

logger = logging.getLogger(__name__)


def serialize_member(user):
    return {
        "id": user.pk,
        "username": user.username,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "role": user.role,
        "isAdmin": user.is_portal_admin,
        "adminLevel": user.admin_level,
    }


@csrf_exempt
@require_POST
@api_view
def login_view(request):
    data = json_body(request)
    identifier = (data.get("username") or data.get("email") or "").strip()
    password = data.get("password") or ""
    if not identifier or not password:
        return error_response("กรุณากรอกชื่อผู้ใช้และรหัสผ่าน", status=400)

    username = identifier
    if "@" in identifier:
        match = (
            get_user_model()
            .objects.filter(email__iexact=identifier)
            .values_list("username", flat=True)
            .first()
        )
        if match:
            username = match

    user = authenticate(request, username=username, password=password)
    if user is None:
        inactive = get_user_model().objects.filter(username=username, is_active=False).first()
        if inactive is not None and inactive.check_password(password):
            return error_response("บัญชีผู้ใช้นี้ถูกระงับการใช้งาน", status=403)
        logger.info("Failed login for %s", identifier)
        return error_response("ชื่อผู้ใช้หรือรหัสผ่านไม่ถูกต้อง", status=401)

    login(request, user)
    log_user_action(request, user, "login", "เข้าสู่ระบบ")
    return success_response(user=serialize_member(user))


@require_POST
@login_required_json
def logout_view(request):
    log_user_action(request, request.user, "logout", "ออกจากระบบ")
    logout(request)
    return success_response(message="ออกจากระบบเรียบร้อยแล้ว")


@require_GET
@ensure_csrf_cookie
@login_required_json
def me(request):
    return success_response(user=serialize_member(request.user))
