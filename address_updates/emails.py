from utils.email import send_portal_email


def _greeting(user):
    return f"เรียน {user.display_name or 'สมาชิก'}\n\n"


def _describe(update, company_name):
    return (
        f"ที่อยู่{update.address_type_text}{update.language_text} "
        f"ของรหัสสมาชิก {update.member_code} ({company_name or 'ไม่ระบุ'})"
    )


def send_request_received(update, company_name):
    return send_portal_email(
        update.user.email,
        "ได้รับคำขอแก้ไขที่อยู่แล้ว - สภาอุตสาหกรรมแห่งประเทศไทย",
        (
            _greeting(update.user)
            + f"ระบบได้รับคำขอแก้ไข{_describe(update, company_name)} เรียบร้อยแล้ว "
            "เจ้าหน้าที่จะตรวจสอบและแจ้งผลให้ทราบ"
        ),
        link="/dashboard?tab=address",
    )


def send_request_approved(update, company_name):
    return send_portal_email(
        update.user.email,
        "คำขอแก้ไขที่อยู่ได้รับการอนุมัติ",
        _greeting(update.user) + f"คำขอแก้ไข{_describe(update, company_name)} ได้รับการอนุมัติแล้ว",
        link="/dashboard?tab=address",
    )


def send_request_rejected(update, company_name, reason):
    return send_portal_email(
        update.user.email,
        "คำขอแก้ไขที่อยู่ไม่ได้รับการอนุมัติ",
        (
            _greeting(update.user)
            + f"คำขอแก้ไข{_describe(update, company_name)} ไม่ได้รับการอนุมัติ\n\n"
            f"เหตุผล: {reason}"
        ),
        link="/dashboard?tab=address",
    )
