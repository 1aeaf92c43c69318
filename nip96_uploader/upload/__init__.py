from nip96_uploader.upload.deleter import DeletionClient, build_deletion_client
from nip96_uploader.upload.models import DeleteOutcome, MediaUploadResult, UploadRequest
from nip96_uploader.upload.uploader import Uploader, build_uploader

__all__ = [
    "DeleteOutcome",
    "DeletionClient",
    "MediaUploadResult",
    "UploadRequest",
    "Uploader",
    "build_deletion_client",
    "build_uploader",
]
