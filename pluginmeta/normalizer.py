"""
pluginmeta Metadata Normalizer

Maps a PackageInfo onto the flat PackageMeta record used by plugin update
checkers:

    PluginHeader.name        -> name
    PluginHeader.version     -> version
    PluginHeader.plugin_uri  -> homepage
    PluginHeader.author      -> author
    PluginHeader.author_uri  -> author_homepage
    ReadmeDocument.requires  -> requires
    ReadmeDocument.tested    -> tested
    ReadmeDocument.sections  -> sections (keys lower-cased, spaces -> "_")
    plugin file directory    -> slug
    "Upgrade Notice" section -> upgrade_notice (entry for the current version)

Empty values are left as None instead of being copied.
"""

import re
from pathlib import PurePosixPath
from typing import Optional, Union

from pluginmeta.scanner import PackageSource, analyse_package
from pluginmeta.schema import PackageInfo, PackageMeta


HEADER_MAPPING: dict[str, str] = {
    "name": "name",
    "version": "version",
    "plugin_uri": "homepage",
    "author": "author",
    "author_uri": "author_homepage",
}

README_MAPPING: list[str] = ["requires", "tested"]

TAG_RE = re.compile(r"<[^>]*>")


def section_key(section_name: str) -> str:
    """
    Turn a section header into a metadata key.

    Example:
        >>> section_key("Upgrade Notice")
        'upgrade_notice'
    """
    return section_name.lower().replace(" ", "_")


def derive_slug(plugin_file: str) -> Optional[str]:
    """
    Derive the plugin slug from the path of its main file.

    The slug is the lower-cased name of the directory holding the file.
    A file at the archive root has no directory and therefore no slug.
    """
    parent = PurePosixPath(plugin_file).parent.name
    return parent.lower() or None


def extract_upgrade_notice(upgrade_notice_html: str, version: str) -> Optional[str]:
    """
    Find the upgrade notice for a specific version.

    Expects the HTML form of the "Upgrade Notice" section, where each
    version is an <h4> heading followed by a paragraph.

    Args:
        upgrade_notice_html: Rendered "Upgrade Notice" section
        version: Version to look for

    Returns:
        The notice as plain text, or None if there's none for this version
    """
    pattern = re.compile(
        r"<h4>\s*" + re.escape(version) + r"\s*</h4>[^<>]*?<p>(.+?)</p>",
        re.IGNORECASE,
    )
    match = pattern.search(upgrade_notice_html)
    if not match:
        return None
    return TAG_RE.sub("", match.group(1)).strip()


def normalize_package_info(info: PackageInfo) -> PackageMeta:
    """
    Convert scan results into update checker metadata.

    Args:
        info: Result of analyse_package()

    Returns:
        PackageMeta with only the fields the package actually provides
    """
    meta = PackageMeta()

    for header_field, meta_field in HEADER_MAPPING.items():
        value = getattr(info.header, header_field)
        if value:
            setattr(meta, meta_field, value)

    if info.readme is not None:
        for readme_field in README_MAPPING:
            value = getattr(info.readme, readme_field)
            if value:
                setattr(meta, readme_field, value)

        if info.readme.sections:
            meta.sections = {
                section_key(name): content
                for name, content in info.readme.sections.items()
            }

        # Check if we have an upgrade notice for this version
        if meta.sections and "upgrade_notice" in meta.sections and meta.version:
            meta.upgrade_notice = extract_upgrade_notice(
                meta.sections["upgrade_notice"], meta.version
            )

    if info.plugin_file:
        meta.slug = derive_slug(info.plugin_file)

    return meta


def get_package_meta(
    package: Union[PackageInfo, PackageSource],
) -> Optional[PackageMeta]:
    """
    Extract update checker metadata from a plugin package.

    Args:
        package: A PackageInfo from analyse_package(), or anything
            analyse_package() accepts. Packages are analysed with
            Markdown conversion on, so sections come back as HTML.

    Returns:
        PackageMeta, or None if the input is not a plugin package
    """
    if not isinstance(package, PackageInfo):
        package = analyse_package(package, apply_markdown=True)
        if package is None:
            return None
    return normalize_package_info(package)
