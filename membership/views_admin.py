from django.views.decorators.http import require_GET, require_POST

from members.decorators import admin_required_json
from utils.api import api_view, get_pagination, json_body, paginate, success_response

from . import rejections, review
from .serializers import application_summary


@require_GET
@admin_required_json
@api_view
def application_list(request):
    page, limit = get_pagination(request)
    applications, pagination = paginate(
        review.list_applications(
            membership_type=request.GET.get("type"),
            status=request.GET.get("status"),
            search=(request.GET.get("search") or "").strip(),
        ),
        page,
        limit,
    )
    return success_response(
        data=[application_summary(a) for a in applications], pagination=pagination
    )


@require_GET
@admin_required_json
@api_view
def application_detail(request, pk):
    return success_response(data=review.load_detail(pk))


@require_POST
@admin_required_json
@api_view
def approve(request, pk):
    data = json_body(request)
    application = review.approve_application(
        request, request.user, pk, note=data.get("adminNote") or data.get("note") or ""
    )
    return success_response(
        message="อนุมัติใบสมัครเรียบร้อยแล้ว", application=application_summary(application)
    )


@require_POST
@admin_required_json
@api_view
def reject(request, pk):
    data = json_body(request)
    result = review.reject_application(
        request,
        request.user,
        pk,
        reason=data.get("reason") or data.get("rejectionReason"),
        admin_note=data.get("adminNote") or "",
    )
    return success_response(message="ปฏิเสธใบสมัครเรียบร้อยแล้ว", **result)


@require_POST
@admin_required_json
@api_view
def save_note(request, pk):
    data = json_body(request)
    review.save_admin_note(request, request.user, pk, data.get("note") or data.get("adminNote") or "")
    return success_response(message="บันทึกหมายเหตุเรียบร้อยแล้ว")


@require_POST
@admin_required_json
@api_view
def update_section(request, pk):
    data = json_body(request)
    section = data.get("section")
    review.update_section(request, request.user, pk, section, data.get("data") or {})
    return success_response(message="บันทึกการแก้ไขเรียบร้อยแล้ว", section=section)


@require_POST
@admin_required_json
@api_view
def switch_type(request, pk):
    data = json_body(request)
    application = review.switch_type(request, request.user, pk, data.get("newType"))
    return success_response(
        message=f"เปลี่ยนประเภทสมาชิกเป็น {application.membership_type.upper()} เรียบร้อยแล้ว",
        application=application_summary(application),
    )


@require_POST
@admin_required_json
@api_view
def connect_member_code(request, pk):
    result = review.connect_member_code(request, request.user, pk)
    return success_response(message="เชื่อมต่อหมายเลขสมาชิกเรียบร้อยแล้ว", **result)


@require_GET
@admin_required_json
@api_view
def analytics(request):
    return success_response(data=review.application_counts())


@require_GET
@admin_required_json
@api_view
def rejection_detail(request, pk):
    return success_response(
        rejection=rejections.rejection_detail(request.user, pk, as_admin=True)
    )


@require_POST
@admin_required_json
@api_view
def rejection_message(request, pk):
    data = json_body(request)
    message = rejections.add_conversation_message(
        request, request.user, pk, data.get("message"), as_admin=True
    )
    return success_response(http_status=201, conversation=message)
