from django.views.decorators.http import require_GET, require_http_methods, require_POST

from members.decorators import admin_required_json, login_required_json
from utils.api import api_view, get_pagination, json_body, paginate, success_response

from . import services


@require_POST
@api_view
def submit(request):
    user = request.user if request.user.is_authenticated else None
    message = services.submit_message(request, user, json_body(request))
    return success_response(
        http_status=201,
        message="ส่งข้อความเรียบร้อยแล้ว เจ้าหน้าที่จะติดต่อกลับโดยเร็วที่สุด",
        messageId=message.pk,
    )


@require_GET
@login_required_json
@api_view
def my_messages(request):
    messages = services.list_my_messages(request.user)
    return success_response(
        messages=[
            {**services.serialize_message(m), "thread": services.conversation_thread(m)}
            for m in messages
        ]
    )


@require_POST
@login_required_json
@api_view
def reply(request, pk):
    data = json_body(request)
    services.member_reply(request, request.user, pk, data.get("message") or data.get("reply"))
    return success_response(message="ส่งข้อความตอบกลับเรียบร้อยแล้ว")


@require_GET
@admin_required_json
@api_view
def admin_list(request):
    page, limit = get_pagination(request)
    messages, pagination = paginate(
        services.list_messages(
            status=request.GET.get("status") or None,
            search=(request.GET.get("search") or "").strip(),
        ),
        page,
        limit,
    )
    return success_response(
        messages=[services.serialize_message(m) for m in messages],
        pagination=pagination,
        stats=services.message_stats(),
    )


@require_GET
@admin_required_json
@api_view
def admin_detail(request, pk):
    return success_response(data=services.message_detail(request, request.user, pk))


@require_POST
@admin_required_json
@api_view
def admin_reply(request, pk):
    data = json_body(request)
    _, email_sent = services.reply(
        request,
        request.user,
        pk,
        data.get("reply_message") or data.get("replyMessage"),
        direct=False,
    )
    return success_response(message="ตอบกลับข้อความเรียบร้อยแล้ว", emailSent=email_sent)


@require_POST
@admin_required_json
@api_view
def admin_direct_reply(request, pk):
    data = json_body(request)
    services.reply(
        request,
        request.user,
        pk,
        data.get("reply_message") or data.get("replyMessage"),
        direct=True,
        admin_response=data.get("admin_response") or "",
    )
    return success_response(message="ส่งข้อความตอบกลับโดยตรงเรียบร้อยแล้ว")


@require_http_methods(["POST", "PUT"])
@admin_required_json
@api_view
def admin_status(request, pk):
    message = services.update_status(request, request.user, pk, json_body(request).get("status"))
    return success_response(message="อัปเดตสถานะเรียบร้อยแล้ว", status=message.status)
