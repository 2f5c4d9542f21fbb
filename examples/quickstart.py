"""Quickstart — one sync pass against a local directory acting as object store.

Demonstrates:
- Building a SyncConfig with the local backend enabled
- Running a pass and inspecting the report
- Running a second pass after the remote copy became the newer one
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from rom_sync import LocalStoreConfig, StorageConfig, SyncConfig, Syncer

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    with tempfile.TemporaryDirectory() as tmp:
        roms = Path(tmp) / "roms"
        (roms / "gba").mkdir(parents=True)
        (roms / "gba" / "Pokemon Red.sav").write_bytes(b"\x00" * 32)
        (roms / "gba" / "Pokemon Red.state1").write_bytes(b"\x01" * 64)

        config = SyncConfig(
            username="player1",
            roms_folder=str(roms),
            storage=StorageConfig(
                local=LocalStoreConfig(root=str(Path(tmp) / "nas"), enabled=True, create_missing_resources=True)
            ),
        )
        config.validate()

        with Syncer.from_config(config) as syncer:
            report = syncer.sync()
            print(f"Bucket: {report.bucket}")
            print(f"Uploaded: {[f.name for f in report.uploaded]}")

            # Without a metadata index the lookup is scoped to the current hour's bucket,
            # so the freshly uploaded copy is newer than the local files' mtimes.
            report = syncer.sync()
            print(f"Downloaded: {[f.name for f in report.downloaded]}")

        for path in sorted((Path(tmp) / "nas").rglob("*")):
            if path.is_file():
                print(f"Stored: {path.relative_to(Path(tmp) / 'nas')}")

    print("Done! Temp directory cleaned up automatically.")
