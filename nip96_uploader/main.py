import json
import mimetypes
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, BinaryIO, Optional

import typer

from nip96_uploader.auth.authorization import AuthorizationHeaderGenerator
from nip96_uploader.auth.factory import SignerFactory
from nip96_uploader.config.settings import Settings
from nip96_uploader.discovery.exceptions import DiscoveryError
from nip96_uploader.discovery.retriever import ServerInfoRetriever
from nip96_uploader.logging.logger import Log
from nip96_uploader.transport.base import BaseTransport
from nip96_uploader.transport.exceptions import TransportError
from nip96_uploader.transport.factory import TransportFactory
from nip96_uploader.upload.deleter import build_deletion_client
from nip96_uploader.upload.exceptions import MediaClientError
from nip96_uploader.upload.uploader import build_uploader

app = typer.Typer(
    name="nip96-upload",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=False,
)

ServerOption = Annotated[
    Optional[str],
    typer.Option("--server", "-s", help="Media server base URL. Defaults to DEFAULT_SERVER_URL."),
]


def resolve_file(path: Path) -> tuple[BinaryIO, int, str | None]:
    """Open ``path`` and return (stream, size in bytes, guessed MIME type)."""
    content_type, _ = mimetypes.guess_type(path.name)
    return path.open("rb"), path.stat().st_size, content_type


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(1)


def _settings() -> Settings:
    try:
        settings = Settings()
        Log.configure(settings.log_level)
    except ValueError as exc:
        raise _fail(exc) from exc
    return settings


def _authorization(settings: Settings) -> AuthorizationHeaderGenerator:
    try:
        authorization = AuthorizationHeaderGenerator(SignerFactory.create(settings))
    except ValueError as exc:
        raise _fail(exc) from exc
    if not authorization.has_identity:
        Log.warning("No signer configured, sending requests without authorization")
    return authorization


def _transport(settings: Settings) -> BaseTransport:
    try:
        return TransportFactory.create(settings)
    except ValueError as exc:
        raise _fail(exc) from exc


@app.command(help="Show the upload endpoints a server advertises.")
def info(server: ServerOption = None) -> None:
    settings = _settings()
    base_url = server or settings.default_server_url
    transport = _transport(settings)
    try:
        descriptor = ServerInfoRetriever(
            transport, user_agent=settings.user_agent
        ).load_info(base_url, TransportFactory.create_proxy_policy(settings))
    except DiscoveryError as exc:
        raise _fail(exc) from exc
    finally:
        transport.close()
    typer.echo(json.dumps(asdict(descriptor), indent=2))


@app.command(help="Upload a file and print the resulting media description.")
def upload(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
    server: ServerOption = None,
    alt: Annotated[Optional[str], typer.Option(help="Alt text for the media.")] = None,
    content_warning: Annotated[
        Optional[str], typer.Option(help="Content warning (sensitivity label).")
    ] = None,
    content_type: Annotated[
        Optional[str], typer.Option(help="Override the MIME type guessed from the file name.")
    ] = None,
) -> None:
    settings = _settings()
    base_url = server or settings.default_server_url
    authorization = _authorization(settings)
    transport = _transport(settings)
    uploader = build_uploader(settings, transport, authorization)

    stream, size, guessed_type = resolve_file(path)
    try:
        with stream:
            result = uploader.upload_to_server(
                base_url,
                stream,
                size,
                content_type=content_type or guessed_type,
                alt_text=alt,
                sensitivity_label=content_warning,
                force_proxy=TransportFactory.create_proxy_policy(settings),
                on_progress=lambda p: typer.echo(f"Processing: {p:.0%}", err=True),
            )
    except (MediaClientError, DiscoveryError, TransportError) as exc:
        raise _fail(exc) from exc
    finally:
        transport.close()
    typer.echo(json.dumps(asdict(result), indent=2))


@app.command(help="Delete a previously uploaded file by its hash.")
def delete(
    file_hash: Annotated[str, typer.Argument(help="sha256 of the original file.")],
    server: ServerOption = None,
    content_type: Annotated[
        Optional[str], typer.Option(help="MIME type, used to build the file extension.")
    ] = None,
) -> None:
    settings = _settings()
    base_url = server or settings.default_server_url
    authorization = _authorization(settings)
    transport = _transport(settings)
    policy = TransportFactory.create_proxy_policy(settings)
    try:
        descriptor = ServerInfoRetriever(
            transport, user_agent=settings.user_agent
        ).load_info(base_url, policy)
        outcome = build_deletion_client(settings, transport, authorization).delete(
            file_hash, content_type, descriptor, policy
        )
    except (MediaClientError, DiscoveryError, TransportError) as exc:
        raise _fail(exc) from exc
    finally:
        transport.close()

    typer.echo(json.dumps(asdict(outcome), indent=2))
    if not outcome.succeeded:
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the ``nip96-upload`` console script."""
    app()


if __name__ == "__main__":
    main()
