"""
Parsers for the two files that describe a plugin.

Available Parsers:
    - parse_plugin_header: Header comment block of the main PHP file
    - parse_readme: readme.txt in the wordpress.org readme format

Usage:
    from pluginmeta.extractors import parse_plugin_header, parse_readme

    header = parse_plugin_header(php_source[:HEADER_SCAN_BYTES])
    readme = parse_readme(readme_text, apply_markdown=True)

Both return None when the input isn't what they expect.
"""

from pluginmeta.extractors.header import (
    cleanup_header_comment,
    extract_header_fields,
    parse_plugin_header,
)
from pluginmeta.extractors.readme import parse_readme

__all__ = [
    "cleanup_header_comment",
    "extract_header_fields",
    "parse_plugin_header",
    "parse_readme",
]
