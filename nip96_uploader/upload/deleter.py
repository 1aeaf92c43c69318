from collections.abc import Callable

from nip96_uploader.auth.authorization import AuthorizationHeaderGenerator
from nip96_uploader.config.settings import Settings
from nip96_uploader.discovery.models import ServerDescriptor
from nip96_uploader.logging.logger import Log
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.models import HttpRequest
from nip96_uploader.transport.proxy_policy import never_proxy
from nip96_uploader.upload.classifier import ResponseClassifier
from nip96_uploader.upload.exceptions import DeletionError
from nip96_uploader.upload.models import DeleteOutcome, Rejected
from nip96_uploader.upload.naming import extension_for, file_name_with_extension


def delete_url(api_url: str, file_hash: str, extension: str) -> str:
    """``<api_url>/<hash>.<ext>``; the dot is dropped when the extension is unknown."""
    return f"{api_url.rstrip('/')}/{file_name_with_extension(file_hash, extension)}"


class DeletionClient:
    """Issues authenticated deletes for previously uploaded files."""

    def __init__(
        self,
        *,
        transport: BaseTransport,
        authorization: AuthorizationHeaderGenerator,
        classifier: ResponseClassifier,
        user_agent: str,
    ) -> None:
        self._transport = transport
        self._authorization = authorization
        self._classifier = classifier
        self._user_agent = user_agent

    def delete(
        self,
        file_hash: str,
        content_type: str | None,
        server: ServerDescriptor,
        force_proxy: Callable[[str], bool] = never_proxy,
    ) -> DeleteOutcome:
        """Delete ``file_hash`` from ``server``.

        Returns:
            DeleteOutcome; ``succeeded`` is False when the server answers 2xx
            with a status other than "success".

        Raises:
            DeletionError: when the server responds with a non-2xx status or
                an unreadable body.
            TransportError: on network failure.
        """
        url = delete_url(server.api_url, file_hash, extension_for(content_type))
        headers = {"User-Agent": self._user_agent}
        token = self._authorization.header_for(url, "DELETE")
        if token is not None:
            headers["Authorization"] = token

        Log.info(f"Deleting {url}")
        response = self._transport.send(
            HttpRequest(method="DELETE", url=url, headers=headers),
            use_proxy=force_proxy(server.api_url),
        )

        outcome = self._classifier.classify_delete(response)
        if isinstance(outcome, Rejected):
            Log.error(f"Deletion of {url} failed: {outcome.message}")
            raise DeletionError(outcome.message, outcome.status_code)

        Log.info(f"Deletion of {url} finished", status=outcome.raw_status)
        return outcome


def build_deletion_client(
    settings: Settings,
    transport: BaseTransport,
    authorization: AuthorizationHeaderGenerator,
) -> DeletionClient:
    return DeletionClient(
        transport=transport,
        authorization=authorization,
        classifier=ResponseClassifier(),
        user_agent=settings.user_agent,
    )
