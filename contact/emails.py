from utils.email import send_portal_email


def send_contact_reply(message, reply_text):
    return send_portal_email(
        message.email,
        f"ตอบกลับ: {message.subject}",
        (
            f"เรียน {message.name}\n\n"
            f"ขอบคุณที่ติดต่อสภาอุตสาหกรรมแห่งประเทศไทย เรื่อง \"{message.subject}\"\n\n"
            f"{reply_text}"
        ),
        link="/dashboard?tab=contact" if message.user_id else None,
    )
