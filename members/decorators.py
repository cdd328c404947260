from functools import wraps

from utils.api import error_response


def login_required_json(view_func):
    """Reject anonymous requests with a 401 JSON envelope."""

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("กรุณาเข้าสู่ระบบ", status=401)
        return view_func(request, *args, **kwargs)

    return wrapper


def admin_required_json(view_func):
    """Allow only portal administrators; 401 when anonymous, 403 otherwise."""

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated:
            return error_response("กรุณาเข้าสู่ระบบ", status=401)
        if not user.is_portal_admin:
            return error_response("ไม่มีสิทธิ์เข้าถึง", status=403)
        return view_func(request, *args, **kwargs)

    return wrapper
