from django.views.decorators.http import require_GET, require_POST

from members.decorators import admin_required_json, login_required_json
from utils.api import api_view, get_pagination, json_body, paginate, success_response

from . import services


@require_POST
@login_required_json
@api_view
def request_update(request):
    update = services.request_address_update(request, request.user, json_body(request))
    return success_response(
        message="คำขอแก้ไขที่อยู่ถูกส่งเรียบร้อยแล้ว กรุณารอการอนุมัติจากผู้ดูแลระบบ",
        requestId=update.pk,
    )


@require_GET
@login_required_json
@api_view
def my_requests(request):
    updates = request.user.address_updates.select_related("user")
    member_code = request.GET.get("memberCode")
    if member_code:
        updates = updates.filter(member_code=member_code)
    return success_response(requests=[services.serialize_request(u) for u in updates])


@require_GET
@admin_required_json
@api_view
def admin_list(request):
    page, limit = get_pagination(request)
    updates, pagination = paginate(
        services.list_requests(
            status=request.GET.get("status") or None,
            search=(request.GET.get("search") or "").strip(),
        ),
        page,
        limit,
    )
    return success_response(
        data=[services.serialize_request(u) for u in updates], pagination=pagination
    )


@require_POST
@admin_required_json
@api_view
def admin_approve(request):
    data = json_body(request)
    services.approve_address_update(
        request, request.user, data.get("id"), admin_notes=data.get("admin_notes") or ""
    )
    return success_response(message="อนุมัติคำขอแก้ไขที่อยู่เรียบร้อยแล้ว")


@require_POST
@admin_required_json
@api_view
def admin_reject(request):
    data = json_body(request)
    services.reject_address_update(
        request,
        request.user,
        data.get("id"),
        data.get("reason"),
        admin_notes=data.get("admin_notes") or "",
    )
    return success_response(message="ปฏิเสธคำขอแก้ไขที่อยู่เรียบร้อยแล้ว")
