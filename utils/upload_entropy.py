import os
import secrets


def upload_with_entropy(subfolder):
    """Build an ``upload_to`` callable that appends a random token to file names.

    Document URLs are not guessable even when two members upload a file
    with the same name.
    """

    def wrapper(instance, filename):
        name, ext = os.path.splitext(os.path.basename(filename))
        token = secrets.token_urlsafe(8)
        return f"{subfolder}/{name[:80]}-{token}{ext.lower()}"

    return wrapper
