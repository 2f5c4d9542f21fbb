"""Backend test fixtures -- parameterized for conformance testing."""

from __future__ import annotations

import socket
import uuid
from typing import TYPE_CHECKING, Any

import pytest

from rom_sync._index import InMemoryMetadataIndex
from rom_sync.backends._local import LocalBackend

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from rom_sync._backend import ObjectBackend

REGION = "us-east-1"
CREDENTIALS = {"aws_access_key_id": "testing", "aws_secret_access_key": "testing", "region_name": REGION}


def _s3_available() -> bool:
    try:
        import boto3  # noqa: F401
        import moto  # noqa: F401
        import s3fs  # noqa: F401

        return True
    except ImportError:
        return False


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("", 0))
        return s.getsockname()[1]


@pytest.fixture(scope="session")
def moto_server() -> Iterator[str | None]:
    """Start a moto HTTP server for the test session.

    Uses server mode instead of mock_aws() to avoid Python 3.13
    PEP 667 f_locals incompatibility with s3fs/aiobotocore.
    """
    if not _s3_available():
        yield None
        return
    from moto.moto_server.threaded_moto_server import ThreadedMotoServer

    port = _free_port()
    server = ThreadedMotoServer(port=port, verbose=False)
    server.start()
    yield f"http://127.0.0.1:{port}"
    server.stop()


@pytest.fixture(autouse=True)
def _aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep botocore away from real credentials and endpoints."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.delenv("AWS_ENDPOINT", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def s3_factory(moto_server: str | None, owner: str) -> Iterator[Callable[..., ObjectBackend]]:
    """Build S3Backends against moto, each with a fresh (not yet created) bucket name."""
    from rom_sync.backends._s3 import S3Backend

    if moto_server is None:
        pytest.skip("moto/s3fs not installed")
    created: list[ObjectBackend] = []

    def _make(**kwargs: Any) -> ObjectBackend:
        kwargs.setdefault("create_missing_resources", True)
        b = S3Backend(
            f"test-{uuid.uuid4().hex[:8]}",
            kwargs.pop("owner", owner),
            key="testing",
            secret="testing",
            region_name=REGION,
            endpoint_url=moto_server,
            **kwargs,
        )
        created.append(b)
        return b

    yield _make
    for b in created:
        b.close()


_s3_param = pytest.param(
    "s3",
    marks=pytest.mark.skipif(not _s3_available(), reason="moto/s3fs not installed"),
)


@pytest.fixture(params=["local", _s3_param])
def backend(
    request: pytest.FixtureRequest,
    moto_server: str | None,
    tmp_path: Path,
    owner: str,
) -> Iterator[ObjectBackend]:
    """Parameterized, initialized object store with an in-memory index. Add new backends here."""
    index = InMemoryMetadataIndex(owner)
    if request.param == "local":
        b: ObjectBackend = LocalBackend(
            str(tmp_path / "container"), owner, create_missing_resources=True, index=index
        )
    elif request.param == "s3":
        b = request.getfixturevalue("s3_factory")(index=index)
    else:
        pytest.skip(f"Unknown backend: {request.param}")
    b.init()
    yield b
    b.close()


@pytest.fixture
def aws_client(moto_server: str | None) -> Callable[[str], Any]:
    """Raw boto3 clients against moto, for arranging and inspecting state."""
    if moto_server is None:
        pytest.skip("moto/s3fs not installed")
    import boto3

    def _client(service: str) -> Any:
        return boto3.client(service, endpoint_url=moto_server, **CREDENTIALS)

    return _client
