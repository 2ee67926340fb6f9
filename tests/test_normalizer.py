"""
Tests for pluginmeta.normalizer module.

Tests mapping of scan results onto update checker metadata.
"""

import io
import tempfile
import zipfile
from pathlib import Path

import pytest

from pluginmeta.normalizer import (
    derive_slug,
    extract_upgrade_notice,
    get_package_meta,
    normalize_package_info,
    section_key,
)
from pluginmeta.schema import PackageInfo, PackageMeta, PluginHeader, ReadmeDocument


UPGRADE_NOTICE_HTML = (
    "<h4>1.1</h4>\n<p>Old notice.</p>\n"
    "<h4>1.2</h4>\n<p>Please <strong>back up</strong> first.</p>"
)


@pytest.fixture
def package_info():
    """Scan results for a plugin with a full readme."""
    return PackageInfo(
        header=PluginHeader(
            name="Demo Plugin",
            version="1.2",
            plugin_uri="https://example.com/demo",
            author="Alice",
            author_uri="https://example.com/alice",
        ),
        plugin_file="Demo-Plugin/demo-plugin.php",
        readme=ReadmeDocument(
            name="Demo Plugin",
            requires="4.0",
            tested="5.0",
            stable="1.2",
            sections={
                "Description": "<p>Demo.</p>",
                "Upgrade Notice": UPGRADE_NOTICE_HTML,
            },
        ),
    )


class TestHelpers:
    """Tests for the normalizer helper functions."""

    def test_section_key(self):
        """Test conversion of section headers to keys."""
        assert section_key("Upgrade Notice") == "upgrade_notice"
        assert section_key("Frequently Asked Questions") == "frequently_asked_questions"
        assert section_key("Changelog") == "changelog"

    def test_slug_from_directory(self):
        """Test that the slug is the plugin file's directory, lower-cased."""
        assert derive_slug("Demo-Plugin/demo-plugin.php") == "demo-plugin"

    def test_slug_at_root(self):
        """Test that a plugin file at the archive root has no slug."""
        assert derive_slug("demo-plugin.php") is None

    def test_upgrade_notice_for_version(self):
        """Test finding the notice for a specific version."""
        assert extract_upgrade_notice(UPGRADE_NOTICE_HTML, "1.2") == "Please back up first."
        assert extract_upgrade_notice(UPGRADE_NOTICE_HTML, "1.1") == "Old notice."

    def test_upgrade_notice_missing_version(self):
        """Test that there's no notice for an unlisted version."""
        assert extract_upgrade_notice(UPGRADE_NOTICE_HTML, "2.0") is None

    def test_upgrade_notice_version_is_literal(self):
        """Test that dots in the version are not treated as wildcards."""
        assert extract_upgrade_notice("<h4>1x2</h4>\n<p>Wrong.</p>", "1.2") is None

    def test_upgrade_notice_case_and_spacing(self):
        """Test tolerance of tag case and whitespace around the version."""
        html = "<H4> 1.2 </H4><P>Shout.</P>"
        assert extract_upgrade_notice(html, "1.2") == "Shout."


class TestNormalizePackageInfo:
    """Tests for normalize_package_info()."""

    def test_full_mapping(self, package_info):
        """Test mapping of every supported field."""
        meta = normalize_package_info(package_info)

        assert meta.name == "Demo Plugin"
        assert meta.version == "1.2"
        assert meta.homepage == "https://example.com/demo"
        assert meta.author == "Alice"
        assert meta.author_homepage == "https://example.com/alice"
        assert meta.requires == "4.0"
        assert meta.tested == "5.0"
        assert meta.slug == "demo-plugin"
        assert meta.sections == {
            "description": "<p>Demo.</p>",
            "upgrade_notice": UPGRADE_NOTICE_HTML,
        }
        assert meta.upgrade_notice == "Please back up first."

    def test_empty_fields_left_out(self):
        """Test that empty header values become None, not ''."""
        info = PackageInfo(header=PluginHeader(name="Bare"), plugin_file="bare.php")
        meta = normalize_package_info(info)

        assert meta == PackageMeta(name="Bare")
        assert meta.to_dict() == {"name": "Bare"}

    def test_no_readme(self, package_info):
        """Test a package without a readme."""
        package_info.readme = None
        meta = normalize_package_info(package_info)

        assert meta.requires is None
        assert meta.tested is None
        assert meta.sections is None
        assert meta.upgrade_notice is None

    def test_readme_without_sections(self, package_info):
        """Test that an empty section list leaves sections unset."""
        package_info.readme.sections = {}
        meta = normalize_package_info(package_info)

        assert meta.sections is None
        assert meta.requires == "4.0"

    def test_upgrade_notice_needs_version(self, package_info):
        """Test that no notice is extracted without a plugin version."""
        package_info.header.version = ""
        meta = normalize_package_info(package_info)

        assert meta.version is None
        assert meta.upgrade_notice is None

    def test_upgrade_notice_plain_text_sections(self, package_info):
        """Test that an unrendered upgrade notice yields no notice."""
        package_info.readme.sections["Upgrade Notice"] = "= 1.2 =\nPlease back up first."
        meta = normalize_package_info(package_info)

        assert meta.upgrade_notice is None

    def test_does_not_modify_input(self, package_info):
        """Test that the scan result is left untouched."""
        normalize_package_info(package_info)

        assert list(package_info.readme.sections) == ["Description", "Upgrade Notice"]


class TestGetPackageMeta:
    """Tests for get_package_meta()."""

    @staticmethod
    def _build_zip() -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr(
                "my-plugin/my-plugin.php",
                "<?php\n/*\nPlugin Name: My Plugin\nVersion: 2.0\n*/\n",
            )
            zf.writestr(
                "my-plugin/readme.txt",
                "=== My Plugin ===\nRequires at least: 5.0\n\nShort.\n\n"
                "== Changelog ==\n= 2.0 =\n* Rewrite\n\n"
                "== Upgrade Notice ==\n= 2.0 =\nBreaking changes.\n\n= 1.0 =\nFirst.\n",
            )
        return buffer.getvalue()

    def test_from_bytes(self):
        """Test metadata extraction straight from archive bytes."""
        meta = get_package_meta(self._build_zip())

        assert meta.name == "My Plugin"
        assert meta.version == "2.0"
        assert meta.requires == "5.0"
        assert meta.slug == "my-plugin"
        assert "<h4>2.0</h4>" in meta.sections["changelog"]
        assert meta.upgrade_notice == "Breaking changes."

    def test_from_path(self):
        """Test metadata extraction from a file on disk."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "my-plugin.zip"
            path.write_bytes(self._build_zip())

            meta = get_package_meta(path)
            assert meta.name == "My Plugin"

    def test_from_package_info(self, package_info):
        """Test that existing scan results are normalized directly."""
        meta = get_package_meta(package_info)
        assert meta == normalize_package_info(package_info)

    def test_not_a_package(self):
        """Test that invalid input gives None."""
        assert get_package_meta(b"garbage") is None
