# ftiportal/storage_backends.py

from django.conf import settings
from storages.backends.gcloud import GoogleCloudStorage


class MediaRootGCS(GoogleCloudStorage):
    # Application documents and verification files live under "media/"
    bucket_name = settings.GS_BUCKET_NAME
    location = getattr(settings, "GS_MEDIA_LOCATION", "media")
    file_overwrite = False
    default_acl = None
    # Membership documents are private; serve them through signed URLs
    querystring_auth = True
    object_parameters = {"cache_control": "private, max-age=300"}


class StaticRootGCS(GoogleCloudStorage):
    bucket_name = settings.GS_BUCKET_NAME
    location = getattr(settings, "GS_STATIC_LOCATION", "static")
    default_acl = None
    querystring_auth = False
    file_overwrite = True
    object_parameters = {"cache_control": "public, max-age=31536000, immutable"}
