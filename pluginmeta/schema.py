"""
pluginmeta Data Model

This module defines the data structures produced while analysing a plugin
package. Parsers produce PluginHeader and ReadmeDocument records, the
package scanner bundles them into a PackageInfo, and the normalizer maps
that onto the flat PackageMeta record consumed by update checkers.

Conventions for missing data:
    - PluginHeader and ReadmeDocument use empty strings and empty lists.
      A field that was not found is "", never None.
    - PackageMeta uses None. None means "could not be determined from the
      package", and such fields are omitted from to_dict().

All records are built fresh for every call and hold no shared state.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


# Canonical header field name -> label that precedes it in the plugin file.
# "_sitewide" is the legacy spelling of "Network" and is folded into it.
HEADER_FIELDS: dict[str, str] = {
    "Name": "Plugin Name",
    "PluginURI": "Plugin URI",
    "Version": "Version",
    "Description": "Description",
    "Author": "Author",
    "AuthorURI": "Author URI",
    "TextDomain": "Text Domain",
    "DomainPath": "Domain Path",
    "Network": "Network",
    "_sitewide": "Site Wide Only",
}

# readme.txt header label -> ReadmeDocument attribute
README_HEADERS: dict[str, str] = {
    "Contributors": "contributors",
    "Donate link": "donate",
    "Tags": "tags",
    "Requires at least": "requires",
    "Tested up to": "tested",
    "Stable tag": "stable",
}

# Only the first 8 KiB of a candidate plugin file are scanned for headers
HEADER_SCAN_BYTES = 8 * 1024


@dataclass
class PluginHeader:
    """
    Metadata declared in the comment block of a plugin's main PHP file.

    Attributes:
        name: Plugin name (always non-empty)
        plugin_uri: Plugin homepage
        version: Plugin version string
        description: One-line description
        author: Author name
        author_uri: Author homepage
        text_domain: Localization text domain
        domain_path: Relative path to translation files
        network: Whether the plugin must be activated network-wide
    """
    name: str
    plugin_uri: str = ""
    version: str = ""
    description: str = ""
    author: str = ""
    author_uri: str = ""
    text_domain: str = ""
    domain_path: str = ""
    network: bool = False

    @property
    def title(self) -> str:
        """Kept for backward compatibility; always the same as name."""
        return self.name

    def to_dict(self) -> dict[str, Any]:
        """Return the header keyed by canonical field names."""
        return {
            "Name": self.name,
            "PluginURI": self.plugin_uri,
            "Version": self.version,
            "Description": self.description,
            "Author": self.author,
            "AuthorURI": self.author_uri,
            "TextDomain": self.text_domain,
            "DomainPath": self.domain_path,
            "Network": self.network,
            "Title": self.title,
        }


@dataclass
class ReadmeDocument:
    """
    A parsed readme.txt.

    Attributes:
        name: Plugin name from the "=== Name ===" title line
        contributors: wordpress.org usernames, in the order listed
        donate: Donation link
        tags: Plugin tags, in the order listed
        requires: Minimum supported WordPress version
        tested: Latest WordPress version the plugin was tested with
        stable: Tag of the latest stable release, or "trunk"
        short_description: The line following the header block
        sections: Section header -> body, in the order the sections appear.
            Header text keeps its original case and spacing.
    """
    name: str
    contributors: list[str] = field(default_factory=list)
    donate: str = ""
    tags: list[str] = field(default_factory=list)
    requires: str = ""
    tested: str = ""
    stable: str = ""
    short_description: str = ""
    sections: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "contributors": list(self.contributors),
            "donate": self.donate,
            "tags": list(self.tags),
            "requires": self.requires,
            "tested": self.tested,
            "stable": self.stable,
            "short_description": self.short_description,
            "sections": dict(self.sections),
        }


@dataclass
class PackageInfo:
    """
    Everything the package scanner found in a plugin archive.

    Attributes:
        header: Headers of the first valid plugin file
        plugin_file: Path of that file, relative to the archive root
        readme: Parsed readme.txt, or None if the archive has none or it
            does not follow the readme convention
        warnings: Non-fatal problems noticed while scanning
    """
    header: PluginHeader
    plugin_file: str
    readme: Optional[ReadmeDocument] = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "readme": self.readme.to_dict() if self.readme else None,
            "plugin_file": self.plugin_file,
        }


@dataclass
class PackageMeta:
    """
    Normalized package metadata in the format used by plugin update checkers.

    Every field is independently optional. None means the value could not
    be determined from the package; no defaults are guessed.

    Example:
        >>> meta = PackageMeta(name="Demo", version="2.0", slug="demo")
        >>> meta.to_dict()
        {'name': 'Demo', 'version': '2.0', 'slug': 'demo'}
    """
    name: Optional[str] = None
    version: Optional[str] = None
    homepage: Optional[str] = None
    author: Optional[str] = None
    author_homepage: Optional[str] = None
    requires: Optional[str] = None
    tested: Optional[str] = None
    slug: Optional[str] = None
    sections: Optional[dict[str, str]] = None
    upgrade_notice: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a mapping, leaving out undetermined fields."""
        result: dict[str, Any] = {}
        for field_name in ["name", "version", "homepage", "author",
                           "author_homepage", "requires", "tested", "slug",
                           "sections", "upgrade_notice"]:
            value = getattr(self, field_name)
            if value is not None:
                result[field_name] = dict(value) if field_name == "sections" else value
        return result
