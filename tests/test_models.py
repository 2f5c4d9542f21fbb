"""Tests for file models, identities and object keys."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest

from rom_sync._identity import file_identity, identity_of, normalize_name
from rom_sync._keys import fallback_key, object_key, split_bucket, time_bucket
from rom_sync._models import FileKind, LocalFile, MetadataRecord, to_millis

if TYPE_CHECKING:
    from pathlib import Path

T0 = datetime(2024, 1, 17, 12, 30, tzinfo=timezone.utc)


class TestFileKind:
    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("Pokemon.gba", FileKind.ROM),
            ("zelda.z64", FileKind.ROM),
            ("mario.sav", FileKind.SAVE),
            ("mario.srm", FileKind.SAVE),
            ("mario.rtc", FileKind.SAVE),
            ("mario.state", FileKind.STATE),
            ("mario.state3", FileKind.STATE),
            ("notes.txt", FileKind.OTHER),
            ("README", FileKind.OTHER),
        ],
    )
    def test_from_name(self, name: str, kind: FileKind) -> None:
        assert FileKind.from_name(name) is kind

    def test_suffix_is_case_insensitive(self) -> None:
        assert FileKind.from_name("GAME.SAV") is FileKind.SAVE

    def test_only_last_suffix_counts(self) -> None:
        assert FileKind.from_name("game.sav.bak") is FileKind.OTHER

    def test_values(self) -> None:
        assert [k.value for k in FileKind] == ["rom", "save", "state", "other"]


class TestLocalFile:
    def test_frozen(self) -> None:
        f = LocalFile(dir="gba", absolute="/roms/gba/x.sav", name="x.sav", last_modified=T0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            f.name = "y.sav"  # type: ignore[misc]

    def test_from_path_nested(self, tmp_path: Path) -> None:
        path = tmp_path / "gba" / "Pokemon Red.sav"
        path.parent.mkdir()
        path.write_bytes(b"x")
        f = LocalFile.from_path(path, root=tmp_path)
        assert f.dir == "gba"
        assert f.name == "Pokemon Red.sav"
        assert f.absolute == str(path.absolute())
        assert f.kind is FileKind.SAVE
        assert f.last_modified.tzinfo is not None

    def test_from_path_deep_dir_uses_posix_separators(self, tmp_path: Path) -> None:
        path = tmp_path / "nintendo" / "gba" / "x.state"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"x")
        assert LocalFile.from_path(path, root=tmp_path).dir == "nintendo/gba"

    def test_from_path_at_root(self, tmp_path: Path) -> None:
        path = tmp_path / "x.sav"
        path.write_bytes(b"x")
        assert LocalFile.from_path(path, root=tmp_path).dir == ""

    def test_from_path_explicit_mtime(self, tmp_path: Path) -> None:
        path = tmp_path / "x.sav"
        path.write_bytes(b"x")
        assert LocalFile.from_path(path, root=tmp_path, last_modified=T0).last_modified == T0

    def test_is_older_than(self) -> None:
        older = LocalFile(dir="", absolute="/a", name="a", last_modified=T0)
        newer = dataclasses.replace(older, last_modified=T0 + timedelta(seconds=1))
        assert older.is_older_than(newer)
        assert not newer.is_older_than(older)
        assert not older.is_older_than(older)


class TestMetadataRecord:
    def test_timestamps_roundtrip_millis(self) -> None:
        ms = to_millis(T0)
        record = MetadataRecord(
            identity="u#gba#x.sav",
            location="k",
            original_name="x.sav",
            directory="gba",
            owner="u",
            kind=FileKind.SAVE,
            last_modified_ms=ms,
            created_ms=ms,
        )
        assert record.last_modified == T0
        assert record.created == T0


class TestIdentity:
    def test_layout(self) -> None:
        assert file_identity("u", "gba", "x.sav") == "u#gba#x.sav"

    @pytest.mark.parametrize(
        ("a", "b"),
        [
            ("Pokemon Red.sav", "pokemon_red.sav"),
            ("POKEMON RED.SAV", "Pokemon_Red.sav"),
            ("a b c.srm", "A_B_C.srm"),
        ],
    )
    def test_case_and_space_insensitive(self, a: str, b: str) -> None:
        assert file_identity("u", "gba", a) == file_identity("u", "gba", b)

    def test_owner_and_dir_separate_identities(self) -> None:
        assert file_identity("u", "gba", "x.sav") != file_identity("v", "gba", "x.sav")
        assert file_identity("u", "gba", "x.sav") != file_identity("u", "snes", "x.sav")

    def test_owner_and_dir_are_not_normalized(self) -> None:
        assert file_identity("User", "GBA", "x.sav") == "User#GBA#x.sav"

    def test_normalize_name(self) -> None:
        assert normalize_name("Final Fantasy VI.SRM") == "final_fantasy_vi.srm"

    def test_identity_of(self) -> None:
        f = LocalFile(dir="gba", absolute="/roms/gba/X Y.sav", name="X Y.sav", last_modified=T0)
        assert identity_of("u", f) == "u#gba#x_y.sav"


class TestKeys:
    def test_time_bucket(self) -> None:
        # December 17, 2023 at 1:18pm
        assert time_bucket(datetime(2023, 12, 17, 13, 18)) == "2023/12/17/13"

    def test_time_bucket_zero_pads(self) -> None:
        assert time_bucket(datetime(2024, 1, 2, 3, 59)) == "2024/01/02/03"

    def test_object_key(self) -> None:
        assert object_key("2024/01/17/12", "u", "gba", "x.sav") == "2024/01/17/12/u/gba/x.sav"

    def test_object_key_trailing_slash_on_bucket(self) -> None:
        assert object_key("2024/01/17/12/", "u", "gba", "x.sav") == "2024/01/17/12/u/gba/x.sav"

    def test_object_key_skips_empty_dir(self) -> None:
        assert object_key("2024/01/17/12", "u", "", "x.sav") == "2024/01/17/12/u/x.sav"

    def test_split_bucket(self) -> None:
        assert split_bucket("2024/01/17/12/gba") == ("2024/01/17/12", "gba")

    def test_split_bucket_single_segment(self) -> None:
        assert split_bucket("gba") == ("", "gba")

    def test_split_bucket_nested_directory(self) -> None:
        assert split_bucket("2024/01/17/12/gba/hacks") == ("2024/01/17/12", "gba/hacks")

    def test_split_bucket_root_directory(self) -> None:
        assert split_bucket("2024/01/17/12/") == ("2024/01/17/12", "")

    def test_split_bucket_without_time_prefix(self) -> None:
        assert split_bucket("backup/gba/hacks") == ("backup/gba", "hacks")

    def test_fallback_key(self) -> None:
        assert fallback_key("u", "2024/01/17/12/gba", "x.sav") == "2024/01/17/12/u/gba/x.sav"

    def test_fallback_key_matches_upload_key(self) -> None:
        bucket = "2024/01/17/12"
        assert fallback_key("u", f"{bucket}/gba", "x.sav") == object_key(bucket, "u", "gba", "x.sav")

    def test_fallback_key_nested(self) -> None:
        bucket = "2024/01/17/12"
        assert fallback_key("u", f"{bucket}/gba/hacks", "x.sav") == object_key(bucket, "u", "gba/hacks", "x.sav")
