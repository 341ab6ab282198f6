"""Tests for manifest parsing, version stamping and write-back."""

import asyncio
import json

import pytest

from beatfetch.exceptions import ManifestError
from beatfetch.manifest import (
    dump_manifest,
    load_manifest,
    parse_manifest,
    save_manifest,
    stamp_version,
)

from conftest import messages


MANIFEST = {
    "$schema": "https://raw.githubusercontent.com/bsmg/BSIPA-MetadataFileSchema/master/Schema.json",
    "id": "examplemod",
    "name": "Exämple Mod",
    "author": "someone",
    "version": "0.1.0",
    "gameVersion": "1.13.2",
    "description": "",
    "dependsOn": {"BSIPA": "^4.1.3"},
    "features": {"some": [1, 2, {"nested": True}]},
}


class TestParseManifest:
    """Tests for parse_manifest."""

    def test_parses_fields(self):
        manifest = parse_manifest(json.dumps(MANIFEST))
        assert manifest.id == "examplemod"
        assert manifest.version == "0.1.0"
        assert manifest.game_version == "1.13.2"
        assert manifest.depends_on == {"BSIPA": "^4.1.3"}

    def test_strips_bom_with_warning(self, log_records):
        manifest = parse_manifest("\ufeff" + json.dumps(MANIFEST))
        assert manifest.id == "examplemod"
        (warning,) = messages(log_records, "WARNING")
        assert warning.startswith("BOM character detected")

    def test_missing_depends_on_is_empty(self):
        data = dict(MANIFEST)
        del data["dependsOn"]
        assert parse_manifest(json.dumps(data)).depends_on == {}

    @pytest.mark.parametrize(
        "text",
        [
            "blah",
            "[]",
            json.dumps({**MANIFEST, "id": 3}),
            json.dumps({**MANIFEST, "gameVersion": None}),
            json.dumps({**MANIFEST, "dependsOn": ["BSIPA"]}),
            json.dumps({**MANIFEST, "dependsOn": {"BSIPA": 4}}),
            json.dumps({**MANIFEST, "version": "1.0"}),
        ],
    )
    def test_malformed_manifest(self, text):
        with pytest.raises(ManifestError):
            parse_manifest(text)


class TestStampVersion:
    """Tests for stamp_version."""

    def test_tag_build(self):
        manifest = parse_manifest(json.dumps({**MANIFEST, "version": "1.2.0-rc.1+meta"}))
        assert stamp_version(manifest, "tag", "v1.2.0-rc.1", "abc") == "1.2.0-rc.1"
        assert manifest.version == "1.2.0-rc.1"

    def test_tag_format(self):
        manifest = parse_manifest(json.dumps(MANIFEST))
        assert stamp_version(manifest, "tag", "release-0.1.0", None, "release-{0}") == "0.1.0"

    def test_tag_mismatch(self):
        manifest = parse_manifest(json.dumps(MANIFEST))
        with pytest.raises(ManifestError, match="Git tag 'v0.2.0' does not match manifest version 'v0.1.0'"):
            stamp_version(manifest, "tag", "v0.2.0", None)

    def test_branch_build_appends_hash(self):
        manifest = parse_manifest(json.dumps(MANIFEST))
        sha = "4ef156d43d79b5b63b421f7e867ff67d57ee42d8"
        assert stamp_version(manifest, "branch", "main", sha) == f"0.1.0+git.{sha}"


class TestSaveManifest:
    """Tests for writing the manifest back to disk."""

    def test_round_trip_is_byte_identical(self, tmp_path):
        original = json.dumps(MANIFEST, indent=4, ensure_ascii=False)
        path = tmp_path / "manifest.json"
        path.write_text(original, encoding="utf-8")

        manifest = asyncio.run(load_manifest(str(path)))
        asyncio.run(save_manifest(str(path), manifest))

        assert path.read_text(encoding="utf-8") == original

    def test_only_version_changes(self, tmp_path):
        original = json.dumps(MANIFEST, indent=4, ensure_ascii=False)
        path = tmp_path / "manifest.json"
        path.write_text(original, encoding="utf-8")

        manifest = asyncio.run(load_manifest(str(path)))
        stamp_version(manifest, "branch", "main", "abc")
        asyncio.run(save_manifest(str(path), manifest))

        expected = original.replace('"version": "0.1.0"', '"version": "0.1.0+git.abc"')
        assert path.read_text(encoding="utf-8") == expected

    def test_dump_uses_four_space_indent(self):
        manifest = parse_manifest(json.dumps(MANIFEST))
        assert '\n    "id": "examplemod",' in dump_manifest(manifest)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ManifestError):
            asyncio.run(load_manifest(str(tmp_path / "missing.json")))
