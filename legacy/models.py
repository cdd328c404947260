from django.conf import settings
from django.db import models

#########################
# Legacy registry models

# Read/write views over the SQL Server member registry. The tables belong to
# the registry, not to this project: they are unmanaged in production and
# only created by Django when LEGACY_DB_MANAGED is on (tests, local
# development). All queries are routed to the "legacy" alias by
# ftiportal.db_routers.LegacyRouter.

LEGACY_MANAGED = getattr(settings, "LEGACY_DB_MANAGED", False)


class RegistryMember(models.Model):
    """One row per registered member company or person (BI_MEMBER)."""

    member_code = models.CharField(max_length=20, primary_key=True, db_column="MEMBER_CODE")
    regist_code = models.CharField(max_length=20, db_column="REGIST_CODE")
    comp_person_code = models.CharField(max_length=20, db_column="COMP_PERSON_CODE")
    member_type_code = models.CharField(max_length=10, blank=True, db_column="MEMBER_TYPE_CODE")
    member_status_code = models.CharField(max_length=10, blank=True, db_column="MEMBER_STATUS_CODE")
    member_main_group_code = models.CharField(
        max_length=10, blank=True, db_column="MEMBER_MAIN_GROUP_CODE"
    )
    tax_id = models.CharField(max_length=20, blank=True, db_index=True, db_column="TAX_ID")
    company_name = models.CharField(max_length=255, blank=True, db_column="COMPANY_NAME")
    company_name_en = models.CharField(max_length=255, blank=True, db_column="COMP_PERSON_NAME_EN")
    member_date = models.DateField(null=True, blank=True, db_column="MEMBER_DATE")

    class Meta:
        managed = LEGACY_MANAGED
        db_table = "BI_MEMBER"

    def __str__(self):
        return f"{self.member_code} {self.company_name}"


class RegistryMemberAddress(models.Model):
    """
    Addresses of a registry member (MB_MEMBER_ADDRESS).

    A row holds one address code (001 contact, 002 document delivery,
    003 tax invoice) in both languages: Thai text in the plain columns,
    English text in the ``_EN`` columns. Telephone, fax, email and website
    are shared by both languages.
    """

    pk = models.CompositePrimaryKey("comp_person_code", "regist_code", "addr_code")
    comp_person_code = models.CharField(max_length=20, db_column="COMP_PERSON_CODE")
    regist_code = models.CharField(max_length=20, db_column="REGIST_CODE")
    addr_code = models.CharField(max_length=3, db_column="ADDR_CODE")
    member_code = models.CharField(max_length=20, blank=True, db_column="MEMBER_CODE")

    addr_no = models.CharField(max_length=100, blank=True, db_column="ADDR_NO")
    addr_moo = models.CharField(max_length=50, blank=True, db_column="ADDR_MOO")
    addr_soi = models.CharField(max_length=100, blank=True, db_column="ADDR_SOI")
    addr_road = models.CharField(max_length=100, blank=True, db_column="ADDR_ROAD")
    addr_sub_district = models.CharField(max_length=100, blank=True, db_column="ADDR_SUB_DISTRICT")
    addr_district = models.CharField(max_length=100, blank=True, db_column="ADDR_DISTRICT")
    addr_province_name = models.CharField(max_length=100, blank=True, db_column="ADDR_PROVINCE_NAME")
    addr_postcode = models.CharField(max_length=10, blank=True, db_column="ADDR_POSTCODE")

    addr_no_en = models.CharField(max_length=100, blank=True, db_column="ADDR_NO_EN")
    addr_moo_en = models.CharField(max_length=50, blank=True, db_column="ADDR_MOO_EN")
    addr_soi_en = models.CharField(max_length=100, blank=True, db_column="ADDR_SOI_EN")
    addr_road_en = models.CharField(max_length=100, blank=True, db_column="ADDR_ROAD_EN")
    addr_sub_district_en = models.CharField(max_length=100, blank=True, db_column="ADDR_SUB_DISTRICT_EN")
    addr_district_en = models.CharField(max_length=100, blank=True, db_column="ADDR_DISTRICT_EN")
    addr_province_name_en = models.CharField(max_length=100, blank=True, db_column="ADDR_PROVINCE_NAME_EN")
    addr_postcode_en = models.CharField(max_length=10, blank=True, db_column="ADDR_POSTCODE_EN")

    addr_telephone = models.CharField(max_length=50, blank=True, db_column="ADDR_TELEPHONE")
    addr_fax = models.CharField(max_length=50, blank=True, db_column="ADDR_FAX")
    addr_email = models.CharField(max_length=255, blank=True, db_column="ADDR_EMAIL")
    addr_website = models.CharField(max_length=255, blank=True, db_column="ADDR_WEBSITE")

    updated_at = models.DateTimeField(null=True, blank=True, db_column="UPDATE_DATE")
    updated_by = models.CharField(max_length=50, blank=True, db_column="UPDATE_BY")

    class Meta:
        managed = LEGACY_MANAGED
        db_table = "MB_MEMBER_ADDRESS"

    def __str__(self):
        return f"{self.regist_code}/{self.addr_code}"
