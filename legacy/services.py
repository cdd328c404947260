"""
Queries and writes against the SQL Server member registry.

Lookups that only enrich a response (tax-id pre-checks, the old address
shown in an update request) degrade gracefully when the registry is down.
Lookups an admin action depends on raise ``ExternalServiceError`` instead.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from utils.exceptions import ExternalServiceError

from .models import RegistryMember, RegistryMemberAddress

logger = logging.getLogger(__name__)

LEGACY_DB = "legacy"

ADDRESS_TEXT_FIELDS = (
    "ADDR_NO",
    "ADDR_MOO",
    "ADDR_SOI",
    "ADDR_ROAD",
    "ADDR_SUB_DISTRICT",
    "ADDR_DISTRICT",
    "ADDR_PROVINCE_NAME",
    "ADDR_POSTCODE",
)
ADDRESS_CONTACT_FIELDS = ("ADDR_TELEPHONE", "ADDR_FAX", "ADDR_EMAIL", "ADDR_WEBSITE")


def normalize_tax_id(value):
    return "".join(ch for ch in str(value or "") if ch.isdigit())


def tax_id_is_registered(tax_id):
    """True when the registry already holds this tax id; False if unreachable."""
    try:
        return RegistryMember.objects.filter(tax_id=tax_id).exists()
    except DatabaseError:
        logger.warning("Registry unavailable while checking tax id %s", tax_id, exc_info=True)
        return False


def find_member_by_tax_id(tax_id):
    try:
        return RegistryMember.objects.filter(tax_id=tax_id).order_by("member_code").first()
    except DatabaseError as exc:
        logger.exception("Registry lookup by tax id %s failed", tax_id)
        raise ExternalServiceError("ไม่สามารถเชื่อมต่อฐานข้อมูลสมาชิกได้") from exc


def find_member_by_code(member_code):
    try:
        return RegistryMember.objects.filter(member_code=member_code).first()
    except DatabaseError as exc:
        logger.exception("Registry lookup by member code %s failed", member_code)
        raise ExternalServiceError("ไม่สามารถเชื่อมต่อฐานข้อมูลสมาชิกได้") from exc


def address_as_dict(address):
    """Render a registry address row with the registry's own column names."""
    data = {"ADDR_CODE": address.addr_code}
    for column in ADDRESS_TEXT_FIELDS + ADDRESS_CONTACT_FIELDS:
        data[column] = getattr(address, column.lower()) or ""
        if column in ADDRESS_TEXT_FIELDS:
            data[f"{column}_EN"] = getattr(address, f"{column.lower()}_en") or ""
    return data


def get_member_address(comp_person_code, regist_code, addr_code):
    try:
        address = RegistryMemberAddress.objects.filter(
            comp_person_code=comp_person_code, regist_code=regist_code, addr_code=addr_code
        ).first()
    except DatabaseError:
        logger.warning(
            "Registry unavailable while loading address %s/%s", regist_code, addr_code, exc_info=True
        )
        return None
    return address_as_dict(address) if address else None


def _address_columns(new_address, lang):
    """Map ``ADDR_*`` keys onto model fields for the chosen language."""
    values = {}
    suffix = "_en" if lang == "en" else ""
    for column in ADDRESS_TEXT_FIELDS:
        value = new_address.get(column)
        if value is None:
            value = new_address.get(f"{column}_EN") if lang == "en" else None
        if value is not None:
            values[f"{column.lower()}{suffix}"] = str(value).strip()
    for column in ADDRESS_CONTACT_FIELDS:
        value = new_address.get(column)
        if value is not None:
            values[column.lower()] = str(value).strip()
    return values


def sync_address(comp_person_code, regist_code, addr_code, lang, new_address, member_code="", updated_by=""):
    """
    Write an approved address into MB_MEMBER_ADDRESS.

    Thai requests update the plain columns, English requests the ``_EN``
    columns; contact columns are shared. The row is created when the member
    has no address under that code yet.
    """
    values = _address_columns(new_address or {}, lang)
    values["updated_at"] = timezone.now()
    values["updated_by"] = str(updated_by or "")[:50]

    try:
        with transaction.atomic(using=LEGACY_DB):
            updated = RegistryMemberAddress.objects.filter(
                comp_person_code=comp_person_code, regist_code=regist_code, addr_code=addr_code
            ).update(**values)
            if not updated:
                RegistryMemberAddress.objects.create(
                    comp_person_code=comp_person_code,
                    regist_code=regist_code,
                    addr_code=addr_code,
                    member_code=member_code or "",
                    **values,
                )
    except DatabaseError as exc:
        logger.exception(
            "Failed to sync address %s/%s (%s) to the registry", regist_code, addr_code, lang
        )
        raise ExternalServiceError("ไม่สามารถบันทึกที่อยู่ลงฐานข้อมูลสมาชิกได้") from exc

    logger.info("Synced address %s/%s (%s) to the registry", regist_code, addr_code, lang)
    return values
