from django.views.decorators.http import require_GET, require_http_methods, require_POST

from members.decorators import login_required_json
from utils.api import api_view, json_body, success_response
from utils.exceptions import NotFound

from . import checks, drafts, rejections
from .models import MembershipApplication, MembershipType
from .serializers import application_detail, application_summary
from .submission import replace_documents, submit_application


def _query_or_body(request, key):
    if request.method == "GET":
        return request.GET.get(key)
    return json_body(request).get(key)


#########################
# Availability checks


@require_http_methods(["GET", "POST"])
@login_required_json
@api_view
def check_tax_id(request):
    result = checks.check_tax_id(_query_or_body(request, "taxId"))
    return success_response(**result)


@require_http_methods(["GET", "POST"])
@login_required_json
@api_view
def check_id_card(request):
    result = checks.check_id_card(_query_or_body(request, "idCardNumber"))
    return success_response(**result)


#########################
# Submission


@require_POST
@login_required_json
@api_view
def submit(request, membership_type):
    if membership_type not in MembershipType.values:
        raise NotFound("ไม่พบประเภทสมาชิกที่ระบุ")
    data = json_body(request)
    application, summary = submit_application(
        request.user, membership_type, data, files=request.FILES, request=request
    )
    return success_response(
        http_status=201,
        message=f"การสมัครสมาชิก {membership_type.upper()} สำเร็จ",
        registrationId=application.pk,
        applicationId=str(application.application_id),
        **summary,
    )


@require_GET
@login_required_json
@api_view
def my_applications(request):
    applications = MembershipApplication.objects.filter(user=request.user)
    membership_type = request.GET.get("type")
    if membership_type:
        applications = applications.filter(membership_type=membership_type.lower())
    return success_response(applications=[application_summary(a) for a in applications])


@require_GET
@login_required_json
@api_view
def my_application_detail(request, pk):
    application = MembershipApplication.objects.filter(user=request.user, pk=pk).first()
    if application is None:
        raise NotFound("ไม่พบข้อมูลใบสมัคร")
    return success_response(application=application_detail(application))


@require_POST
@login_required_json
@api_view
def update_documents(request, pk):
    summary = replace_documents(request.user, pk, request.FILES, request=request)
    if not summary["replaced"]:
        return success_response(message="ไม่มีไฟล์ที่ต้องอัปเดต", **summary)
    return success_response(message="อัปเดตเอกสารแนบเรียบร้อยแล้ว", **summary)


#########################
# Drafts


@require_http_methods(["GET", "POST"])
@login_required_json
@api_view
def draft_list(request):
    if request.method == "POST":
        data = json_body(request)
        draft = drafts.save_draft(
            request.user,
            (data.get("memberType") or "").lower(),
            data.get("draftData") or {},
            data.get("currentStep"),
        )
        return success_response(message="บันทึกร่างเรียบร้อยแล้ว", draft=drafts.serialize_draft(draft))

    items = drafts.list_drafts(request.user, (request.GET.get("type") or "").lower() or None)
    return success_response(drafts=[drafts.serialize_draft(d) for d in items])


@require_http_methods(["GET", "DELETE"])
@login_required_json
@api_view
def draft_detail(request, pk):
    if request.method == "DELETE":
        drafts.delete_draft(request.user, pk)
        return success_response(message="ลบร่างเรียบร้อยแล้ว")
    draft = drafts.get_draft(request.user, pk)
    return success_response(draft=drafts.serialize_draft(draft, include_data=True))


#########################
# Rejections


@require_GET
@login_required_json
@api_view
def rejection_list(request):
    return success_response(
        rejections=rejections.list_rejections(request.user, request.GET.get("status"))
    )


@require_GET
@login_required_json
@api_view
def rejection_detail(request, pk):
    return success_response(rejection=rejections.rejection_detail(request.user, pk))


@require_POST
@login_required_json
@api_view
def rejection_message(request, pk):
    data = json_body(request)
    message = rejections.add_conversation_message(request, request.user, pk, data.get("message"))
    return success_response(http_status=201, conversation=message)


@require_POST
@login_required_json
@api_view
def rejection_resubmit(request, pk):
    data = json_body(request)
    application = rejections.resubmit(
        request,
        request.user,
        pk,
        comment=data.get("userComment") or data.get("comment") or "",
        data=data.get("formData"),
    )
    return success_response(
        message="ส่งใบสมัครใหม่เรียบร้อยแล้ว กรุณารอการพิจารณาจากเจ้าหน้าที่",
        application=application_summary(application),
    )


@require_POST
@login_required_json
@api_view
def rejection_cancel(request, pk):
    rejections.cancel_rejection(request, request.user, pk)
    return success_response(message="ยกเลิกคำขอเรียบร้อยแล้ว")
