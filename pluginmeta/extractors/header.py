"""
Plugin Header Extractor

This module reads the metadata block at the top of a plugin's main PHP file:

    <?php
    /*
    Plugin Name: Name of Plugin
    Plugin URI: Link to plugin information
    Description: Plugin Description
    Author: Plugin author's name
    Author URI: Link to the author's web site
    Version: 1.0
    Text Domain: my-plugin
    Domain Path: /languages/
    Network: true
    */

Each field must sit on its own line. Only the first line of a field is
read, so multi-line values are truncated to their first line.

The same rules WordPress uses are applied: labels are matched
case-insensitively, may be preceded by comment characters, and anything
after a closing "*/" or "?>" is discarded.
"""

import re
from typing import Optional, Union

from pluginmeta.schema import HEADER_FIELDS, PluginHeader


BYTE_ORDER_MARK = "\ufeff"


# Everything from a comment or PHP block terminator to the end of the value
_CLOSING_TOKEN_RE = re.compile(r"\s*(?:\*/|\?>).*")


def cleanup_header_comment(value: str) -> str:
    """
    Strip comment-closing and PHP-closing tags from a header value.

    Args:
        value: Raw text captured after a header label

    Returns:
        The value cut before the first "*/" or "?>", trimmed

    Example:
        >>> cleanup_header_comment(" 2.0 */ trailing junk")
        '2.0'
    """
    return _CLOSING_TOKEN_RE.sub("", value).strip()


def _field_pattern(label: str) -> re.Pattern:
    # Optional opening tag, then any comment decoration before the label
    return re.compile(
        r"^(?:[ \t]*<\?php)?[ \t/*#@]*" + re.escape(label) + r":(.*)$",
        re.IGNORECASE | re.MULTILINE,
    )


def extract_header_fields(
    text: str,
    schema: Optional[dict[str, str]] = None,
) -> dict[str, str]:
    """
    Search text for "Label: value" lines.

    Values are returned as captured, up to the end of the line. They still
    carry surrounding whitespace and any trailing comment terminator; pass
    them through cleanup_header_comment() before use.

    Args:
        text: File contents (usually the first 8 KiB of a PHP file)
        schema: Canonical field name -> label. Defaults to HEADER_FIELDS.

    Returns:
        One raw value per schema field; "" for fields that were not found
    """
    if schema is None:
        schema = HEADER_FIELDS

    fields: dict[str, str] = {}
    for field_name, label in schema.items():
        match = _field_pattern(label).search(text)
        fields[field_name] = match.group(1) if match else ""
    return fields


def parse_plugin_header(data: Union[bytes, str]) -> Optional[PluginHeader]:
    """
    Parse the plugin header block from the beginning of a PHP file.

    Callers should pass no more than HEADER_SCAN_BYTES of the file, since
    that is all WordPress itself looks at.

    Args:
        data: Raw file contents. Bytes are decoded as UTF-8; invalid
            sequences (e.g. a character cut by truncation) are replaced
            and a leading byte order mark is dropped.

    Returns:
        PluginHeader, or None if no "Plugin Name" is declared. A file
        without a name is not a plugin file.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8-sig", errors="replace")
    data = data.lstrip(BYTE_ORDER_MARK)

    fields = {
        field_name: cleanup_header_comment(value)
        for field_name, value in extract_header_fields(data, HEADER_FIELDS).items()
    }

    if not fields["Name"]:
        return None

    # "Site Wide Only" is the deprecated spelling of "Network"
    network = fields["Network"] or fields["_sitewide"]

    return PluginHeader(
        name=fields["Name"],
        plugin_uri=fields["PluginURI"],
        version=fields["Version"],
        description=fields["Description"],
        author=fields["Author"],
        author_uri=fields["AuthorURI"],
        text_domain=fields["TextDomain"],
        domain_path=fields["DomainPath"],
        network=network.lower() == "true",
    )
