"""File names for uploads and deletions."""

import mimetypes
import secrets
import string

FILE_NAME_LENGTH = 16

_CHAR_POOL = string.ascii_letters + string.digits


def random_file_name(length: int = FILE_NAME_LENGTH) -> str:
    """Random ``[a-zA-Z0-9]`` token used as the uploaded file's name."""
    return "".join(secrets.choice(_CHAR_POOL) for _ in range(length))


def extension_for(content_type: str | None) -> str:
    """File extension (without dot) for a MIME type, or "" if unknown."""
    if content_type is None or not content_type.strip():
        return ""
    mime = content_type.split(";", 1)[0].strip().lower()
    extension = mimetypes.guess_extension(mime)
    return extension.lstrip(".") if extension else ""


def file_name_with_extension(name: str, extension: str) -> str:
    return f"{name}.{extension}" if extension else name
