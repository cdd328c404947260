from utils.email import send_portal_email


def _recipient(company):
    user = company.user
    return user.email, user.display_name or "สมาชิก"


def send_verification_approved(company):
    email, name = _recipient(company)
    body = (
        f"เรียน {name}\n\n"
        f"การยืนยันสมาชิกเดิมของท่าน รหัสสมาชิก {company.member_code} "
        f"({company.company_name}) ได้รับการอนุมัติแล้ว"
    )
    if company.admin_comment:
        body += f"\n\nหมายเหตุจากเจ้าหน้าที่: {company.admin_comment}"
    return send_portal_email(
        email, "การยืนยันสมาชิกเดิมได้รับการอนุมัติ", body, link="/dashboard?tab=member"
    )


def send_verification_rejected(company):
    email, name = _recipient(company)
    return send_portal_email(
        email,
        "ผลการยืนยันสมาชิกเดิม",
        (
            f"เรียน {name}\n\n"
            f"การยืนยันสมาชิกเดิมของท่าน รหัสสมาชิก {company.member_code} "
            f"({company.company_name}) ไม่ได้รับการอนุมัติ\n\n"
            f"เหตุผล: {company.reject_reason}"
        ),
        link="/dashboard?tab=status",
    )
