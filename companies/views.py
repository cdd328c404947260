from django.views.decorators.http import require_GET, require_POST

from members.decorators import admin_required_json, login_required_json
from utils.api import api_view, get_pagination, json_body, paginate, success_response

from . import services


@require_POST
@login_required_json
@api_view
def submit_verification(request):
    data = json_body(request)
    company = services.submit_verification(
        request,
        request.user,
        member_code=data.get("memberCode"),
        tax_id=data.get("taxId"),
        document=request.FILES.get("document"),
        company_type=(data.get("companyType") or "").strip(),
    )
    return success_response(
        http_status=201,
        message="ส่งคำขอยืนยันสมาชิกเดิมเรียบร้อยแล้ว กรุณารอการตรวจสอบจากเจ้าหน้าที่",
        company=services.serialize_company(company),
    )


@require_GET
@login_required_json
@api_view
def my_companies(request):
    companies = request.user.companies.prefetch_related("documents")
    return success_response(companies=[services.serialize_company(c) for c in companies])


@require_GET
@login_required_json
@api_view
def approved_companies(request):
    companies = services.list_approved_companies(request.user)
    return success_response(companies=[services.serialize_company(c) for c in companies])


@require_GET
@admin_required_json
@api_view
def admin_verifications(request):
    page, limit = get_pagination(request)
    companies, pagination = paginate(
        services.list_verifications(
            status=request.GET.get("status"), search=(request.GET.get("search") or "").strip()
        ),
        page,
        limit,
    )
    data = []
    for company in companies:
        item = services.serialize_company(company)
        item["userEmail"] = company.user.email
        item["userName"] = company.user.display_name
        data.append(item)
    return success_response(data=data, pagination=pagination)


@require_POST
@admin_required_json
@api_view
def admin_review_verification(request, pk):
    data = json_body(request)
    action = data.get("action")
    company = services.review_verification(
        request,
        request.user,
        pk,
        action,
        document_id=data.get("documentId"),
        reason=data.get("reason") or data.get("rejectReason") or "",
        comment=data.get("comment") or data.get("adminComment") or "",
    )
    messages = {
        "approve": "อนุมัติการยืนยันสมาชิกเรียบร้อยแล้ว",
        "reject": "ปฏิเสธการยืนยันสมาชิกเรียบร้อยแล้ว",
        "delete": "ลบคำขอยืนยันสมาชิกเรียบร้อยแล้ว",
    }
    return success_response(message=messages[action], company=services.serialize_company(company))
