"""Workflow emails for membership applications. All failures are tolerated."""

from utils.email import send_portal_email


def _recipient(application):
    user = application.user
    name = user.display_name if user else ""
    return (user.email if user else ""), name or "ผู้สมัคร"


def send_submission_confirmation(application):
    email, name = _recipient(application)
    return send_portal_email(
        email,
        f"ยืนยันการสมัครสมาชิก {application.membership_type.upper()} - สภาอุตสาหกรรมแห่งประเทศไทย",
        (
            f"เรียน {name}\n\n"
            f"ระบบได้รับใบสมัครสมาชิกประเภท {application.type_label} "
            f"ของ {application.display_name} เรียบร้อยแล้ว "
            "เจ้าหน้าที่จะดำเนินการพิจารณาและแจ้งผลให้ทราบทางอีเมล"
        ),
        link="/dashboard?tab=status",
    )


def send_approval_email(application, comment=""):
    email, name = _recipient(application)
    body = (
        f"เรียน {name}\n\n"
        f"ใบสมัครสมาชิกประเภท {application.type_label} ของ {application.display_name} "
        "ได้รับการอนุมัติแล้ว"
    )
    if comment:
        body += f"\n\nหมายเหตุจากเจ้าหน้าที่: {comment}"
    return send_portal_email(
        email, "ใบสมัครสมาชิกของท่านได้รับการอนุมัติ", body, link="/dashboard?tab=status"
    )


def send_rejection_email(application, reason):
    email, name = _recipient(application)
    return send_portal_email(
        email,
        "ผลการพิจารณาใบสมัครสมาชิก - กรุณาแก้ไขข้อมูล",
        (
            f"เรียน {name}\n\n"
            f"ใบสมัครสมาชิกประเภท {application.type_label} ของ {application.display_name} "
            f"ไม่ผ่านการพิจารณา\n\nเหตุผล: {reason}\n\n"
            "ท่านสามารถแก้ไขข้อมูลและส่งใบสมัครใหม่ได้ที่หน้าแดชบอร์ด"
        ),
        link="/dashboard?tab=status",
    )


def send_member_connection_email(application, member_code):
    email, name = _recipient(application)
    return send_portal_email(
        email,
        "แจ้งหมายเลขสมาชิก สภาอุตสาหกรรมแห่งประเทศไทย",
        (
            f"เรียน {name}\n\n"
            f"{application.display_name} ได้รับหมายเลขสมาชิก {member_code} "
            "และเป็นสมาชิกสภาอุตสาหกรรมแห่งประเทศไทยเรียบร้อยแล้ว"
        ),
        link="/dashboard?tab=member",
    )
