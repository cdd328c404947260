"""
Exceptions raised by portal service functions.

Services raise these; the ``api_view`` decorator in ``utils.api`` turns them
into the JSON error envelope with the matching HTTP status.
"""


class PortalError(Exception):
    status_code = 400
    default_message = "คำขอไม่ถูกต้อง"

    def __init__(self, message=None, status_code=None, **extra):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra
        super().__init__(self.message)


class ValidationFailed(PortalError):
    status_code = 400
    default_message = "ข้อมูลไม่ถูกต้อง"


class Unauthenticated(PortalError):
    status_code = 401
    default_message = "กรุณาเข้าสู่ระบบ"


class Forbidden(PortalError):
    status_code = 403
    default_message = "ไม่มีสิทธิ์เข้าถึง"


class NotFound(PortalError):
    status_code = 404
    default_message = "ไม่พบข้อมูล"


class Conflict(PortalError):
    status_code = 409
    default_message = "ข้อมูลซ้ำกับที่มีอยู่แล้ว"


class ExternalServiceError(PortalError):
    status_code = 500
    default_message = "ไม่สามารถเชื่อมต่อระบบภายนอกได้"
