"""Tests for the configuration-only backends."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rom_sync._backend import StorageBackend
from rom_sync._config import DriveConfig, SFTPConfig
from rom_sync._errors import BackendNotImplemented
from rom_sync._models import LocalFile, RetrieveRequest
from rom_sync.backends._stubs import DriveBackend, SFTPBackend

FILE = LocalFile(
    dir="gba",
    absolute="/roms/gba/x.sav",
    name="x.sav",
    last_modified=datetime(2024, 1, 17, 12, 30, tzinfo=timezone.utc),
)


@pytest.fixture(
    params=[
        pytest.param(lambda: SFTPBackend.from_config(SFTPConfig(enabled=True, host="nas"), "tester"), id="sftp"),
        pytest.param(lambda: DriveBackend.from_config(DriveConfig(enabled=True, folder="retro"), "tester"), id="gdrive"),
    ]
)
def stub(request: pytest.FixtureRequest) -> StorageBackend:
    return request.param()


class TestStubs:
    def test_names(self) -> None:
        assert SFTPBackend(SFTPConfig()).name == "sftp"
        assert DriveBackend(DriveConfig()).name == "gdrive"

    def test_repr(self) -> None:
        assert repr(SFTPBackend(SFTPConfig(host="nas", port=2222))) == "SFTPBackend(host='nas', port=2222)"

    def test_init_raises(self, stub: StorageBackend) -> None:
        with pytest.raises(BackendNotImplemented) as exc_info:
            stub.init()
        assert exc_info.value.backend == stub.name

    def test_store_raises(self, stub: StorageBackend) -> None:
        with pytest.raises(BackendNotImplemented):
            stub.store("2024/01/17/12", FILE)
        with pytest.raises(BackendNotImplemented):
            stub.store_all("2024/01/17/12", [FILE])

    def test_reads_raise(self, stub: StorageBackend) -> None:
        with pytest.raises(BackendNotImplemented):
            stub.get_last_modified("2024/01/17/12", FILE)
        with pytest.raises(BackendNotImplemented):
            stub.retrieve(RetrieveRequest(to_retrieve=FILE, destination=FILE))

    def test_close_is_noop(self, stub: StorageBackend) -> None:
        with stub:
            pass
