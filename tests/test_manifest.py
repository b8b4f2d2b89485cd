"""Tests for manifest reading and field extraction."""

import json

from package_versions.constants import DEFAULT_FIELDS
from package_versions.manifest import extract_fields, read_manifest


class TestReadManifest:
    """Reading never raises; failures come back as None."""

    def test_reads_valid_manifest(self, write_manifest):
        path = write_manifest(dependencies={"lodash": "^4.17.21"})
        data = read_manifest(path)
        assert data["dependencies"] == {"lodash": "^4.17.21"}

    def test_missing_file(self, tmp_path):
        assert read_manifest(tmp_path / "package.json") is None

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text('{"dependencies": {')
        assert read_manifest(path) is None

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps(["not", "a", "manifest"]))
        assert read_manifest(path) is None

    def test_directory_instead_of_file(self, tmp_path):
        (tmp_path / "package.json").mkdir()
        assert read_manifest(tmp_path / "package.json") is None


class TestExtractFields:
    """Projection of a manifest onto tracked fields."""

    def test_mapping_fields_copied(self):
        manifest = {
            "dependencies": {"react": "^18.2.0"},
            "devDependencies": {"vitest": "1.0.0"},
        }
        out = extract_fields(manifest, DEFAULT_FIELDS)
        assert out == {
            "dependencies": {"react": "^18.2.0"},
            "devDependencies": {"vitest": "1.0.0"},
        }
        # Shallow copy, not the same object
        assert out["dependencies"] is not manifest["dependencies"]

    def test_list_field_uses_sentinel(self):
        manifest = {"bundledDependencies": ["left-pad", "chalk"]}
        out = extract_fields(manifest, DEFAULT_FIELDS)
        assert out == {"bundledDependencies": {"left-pad": "*", "chalk": "*"}}

    def test_only_tracked_fields(self):
        manifest = {
            "dependencies": {"a": "1"},
            "peerDependencies": {"b": "2"},
            "scripts": {"build": "tsc"},
        }
        out = extract_fields(manifest, ["dependencies"])
        assert list(out) == ["dependencies"]

    def test_absent_and_null_fields_omitted(self):
        manifest = {"dependencies": None}
        assert extract_fields(manifest, DEFAULT_FIELDS) == {}

    def test_other_shapes_omitted(self):
        manifest = {"dependencies": "lodash", "devDependencies": 3}
        assert extract_fields(manifest, DEFAULT_FIELDS) == {}

    def test_empty_mapping_kept(self):
        out = extract_fields({"dependencies": {}}, DEFAULT_FIELDS)
        assert out == {"dependencies": {}}
