"""Configuration — YAML files, from_dict(), and the example config writer.

Demonstrates different ways to create a SyncConfig, including the camelCase
keys accepted from older config files and the S3 + DynamoDB setup.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from rom_sync import ConfigError, SyncConfig, create_backend, load_config, write_example_config

if __name__ == "__main__":
    # --- Option 1: from_dict(), e.g. parsed from YAML or JSON ---
    config = SyncConfig.from_dict(
        {
            "username": "player1",
            "roms_folder": "/home/pi/RetroPie/roms",
            "storage": {
                "s3": {
                    "bucket": "retropie-sync",
                    "enabled": True,
                    "create_missing_resources": True,
                    "metadata_index": {"table_name": "rom-sync", "enabled": True, "create_missing_resources": True},
                },
            },
            "sync": {"roms": False, "saves": True, "states": True},
        }
    )
    config.validate()
    print(f"Kinds: {[k.value for k in config.sync.enabled_kinds()]}")

    # Construction is lazy: nothing touches AWS until init() or the first sync
    backend = create_backend(config)
    print(f"Backend: {backend!r}, index: {backend.index!r}")  # type: ignore[attr-defined]

    # --- Option 2: camelCase keys from older config files ---
    legacy = SyncConfig.from_dict(
        {
            "username": "player1",
            "romsFolder": "/home/pi/RetroPie/roms",
            "storage": {"s3": {"bucket": "retropie-sync", "enabled": True, "dynamoDB": {"tableName": "rom-sync"}}},
        }
    )
    print(f"Legacy table: {legacy.storage.s3.metadata_index.table_name}")

    # --- Option 3: a YAML file on disk ---
    with tempfile.TemporaryDirectory() as tmp:
        example = write_example_config(tmp)
        print(f"\nWrote {example.name}:\n{example.read_text()}")

        try:
            load_config(example)
        except ConfigError as exc:
            print(f"Rejected until edited: {exc}")

        edited = Path(tmp) / "config.yaml"
        edited.write_text(example.read_text().replace("DEFAULT_USERNAME_CHANGE_THIS_VALUE", "player1"))
        print(f"Loaded owner: {load_config(edited).username}")
