"""
pluginmeta Package Scanner

This module walks the entries of a plugin's ZIP archive to find the two
files that describe the plugin:

    1. The main plugin file: the first PHP file at the archive root or one
       directory down that declares a "Plugin Name" header.
    2. readme.txt: the first entry with that basename, at any depth.

Both are handed to their parsers and the results are bundled into a
PackageInfo.

Design Notes:
    - Entries are visited in archive order and the scan stops as soon as
      both files have been found.
    - Only the first readme.txt is tried. If it isn't in the readme format
      the package simply has no readme; later readme.txt files are ignored.
    - Depth and size limits follow what WordPress does when it looks for
      plugin files in the plugins directory.

Failure Modes:
    - Missing file, unreadable file, or not a ZIP archive -> None
    - No valid plugin header anywhere -> None
    - Problems with individual entries or the readme -> warnings only
"""

import io
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from pluginmeta.extractors.header import parse_plugin_header
from pluginmeta.extractors.readme import parse_readme
from pluginmeta.schema import (
    HEADER_SCAN_BYTES,
    PackageInfo,
    PluginHeader,
    ReadmeDocument,
)


PackageSource = Union[str, Path, bytes, BinaryIO]

# Errors raised by ZipFile() for archives it can't read, e.g. an
# unsupported zip version or a corrupt central directory
ARCHIVE_OPEN_ERRORS = (zipfile.BadZipFile, OSError, EOFError, ValueError, NotImplementedError)

# Errors raised while decompressing a single archive member. ValueError also
# covers UnicodeDecodeError from mismatched local and central entry names.
ENTRY_READ_ERRORS = (zipfile.BadZipFile, zlib.error, RuntimeError, OSError, EOFError, ValueError)


@dataclass
class ScanOptions:
    """
    Configuration options for package scanning.

    Attributes:
        apply_markdown: Convert readme sections from Markdown to HTML
        header_scan_bytes: How much of each PHP file to search for headers
        readme_filename: Basename of the readme file (compared case-insensitively)
        header_extension: Extension of candidate plugin files
        max_header_depth: Maximum number of "/" separators in the path of
            a plugin file (1 = archive root or one directory down)
    """
    apply_markdown: bool = False
    header_scan_bytes: int = HEADER_SCAN_BYTES
    readme_filename: str = "readme.txt"
    header_extension: str = "php"
    max_header_depth: int = 1


def normalize_entry_name(name: str) -> str:
    """
    Normalize an archive entry name.

    Backslashes become forward slashes; leading and trailing slashes are
    removed.

    Example:
        >>> normalize_entry_name("\\\\my-plugin\\\\my-plugin.php")
        'my-plugin/my-plugin.php'
    """
    return name.replace("\\", "/").strip("/")


def is_readme_candidate(entry_name: str, options: ScanOptions) -> bool:
    """Check whether a normalized entry name is a readme file."""
    basename = entry_name.rsplit("/", 1)[-1]
    return basename.lower() == options.readme_filename.lower()


def is_header_candidate(entry_name: str, size: int, options: ScanOptions) -> bool:
    """
    Check whether an entry could be the main plugin file.

    Empty entries (including directories) are skipped, as are files with
    another extension and files nested deeper than max_header_depth.
    """
    if size == 0:
        return False

    extension = entry_name.rsplit(".", 1)[-1]
    if extension.lower() != options.header_extension.lower():
        return False

    return entry_name.count("/") <= options.max_header_depth


def _open_archive(package: PackageSource) -> Optional[zipfile.ZipFile]:
    """Open package as a ZIP archive, returning None if that fails."""
    if isinstance(package, bytes):
        package = io.BytesIO(package)
    elif isinstance(package, (str, Path)):
        path = Path(package)
        if not path.is_file():
            return None
        package = path

    try:
        return zipfile.ZipFile(package, "r")
    except ARCHIVE_OPEN_ERRORS:
        return None


def analyse_package(
    package: PackageSource,
    apply_markdown: bool = False,
    options: Optional[ScanOptions] = None,
) -> Optional[PackageInfo]:
    """
    Extract the plugin header and readme.txt data from a plugin's ZIP archive.

    Args:
        package: Path to the archive, its raw bytes, or a binary file object
        apply_markdown: Convert readme sections to HTML. Ignored when
            options are given; set ScanOptions.apply_markdown instead.
        options: Scanning options (uses defaults if not provided)

    Returns:
        PackageInfo, or None if the input is not a readable ZIP archive or
        contains no PHP file with a valid plugin header.
    """
    if options is None:
        options = ScanOptions(apply_markdown=apply_markdown)

    archive = _open_archive(package)
    if archive is None:
        return None

    header: Optional[PluginHeader] = None
    plugin_file: Optional[str] = None
    readme: Optional[ReadmeDocument] = None
    readme_tried = False
    warnings: list[str] = []

    with archive:
        for info in archive.infolist():
            if header is not None and readme_tried:
                break

            entry_name = normalize_entry_name(info.filename)

            if not readme_tried and is_readme_candidate(entry_name, options):
                readme_tried = True
                try:
                    contents = archive.read(info)
                except ENTRY_READ_ERRORS as e:
                    warnings.append(f"Could not read {entry_name}: {e}")
                    continue

                readme = parse_readme(contents, options.apply_markdown)
                if readme is None:
                    warnings.append(
                        f"{entry_name} does not start with a '=== Plugin Name ===' line; ignoring it"
                    )
                continue

            if header is None and is_header_candidate(entry_name, info.file_size, options):
                try:
                    with archive.open(info) as entry:
                        head = entry.read(options.header_scan_bytes)
                except ENTRY_READ_ERRORS as e:
                    warnings.append(f"Could not read {entry_name}: {e}")
                    continue

                header = parse_plugin_header(head)
                if header is not None:
                    plugin_file = entry_name

    if header is None or plugin_file is None:
        return None

    return PackageInfo(
        header=header,
        plugin_file=plugin_file,
        readme=readme,
        warnings=warnings,
    )
