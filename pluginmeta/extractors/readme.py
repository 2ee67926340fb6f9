"""
readme.txt Parser

Parses plugin readme files written in the wordpress.org readme convention:

    === Plugin Name ===
    Contributors: alice, bob
    Donate link: https://example.com/donate
    Tags: foo, bar
    Requires at least: 4.0
    Tested up to: 5.0
    Stable tag: 1.2

    Short description on a single line.

    == Description ==
    Free-form text.

    == Changelog ==
    = 1.2 =
    * Fixed stuff.

The format is parsed line by line:
    1. Title line ("=== Name ===") - required, otherwise the file is rejected
    2. "Label: value" header lines up to the first blank line
    3. One line of short description
    4. "== Section ==" blocks until the end of the file

Everything after the title line is optional. Missing or malformed parts
produce empty values rather than errors.

Limitations:
    - wordpress.org's own rendering is not reproduced exactly. In
      particular, HTML mixed into sections may come out differently.
"""

import re
from typing import Optional, Union

from pluginmeta.markup import apply_markdown as render_markdown
from pluginmeta.schema import README_HEADERS, ReadmeDocument


TITLE_RE = re.compile(r"^\s*={3,}\s*(.+?)\s*={3,}\s*$")
SECTION_RE = re.compile(r"^\s*==\s+(.+?)\s+==\s*$")
LINE_SPLIT_RE = re.compile(r"\r?\n")
BYTE_ORDER_MARK = "\ufeff"

# Header fields holding comma-separated lists
LIST_FIELDS = ("contributors", "tags")


def parse_readme(
    contents: Union[bytes, str],
    apply_markdown: bool = False,
) -> Optional[ReadmeDocument]:
    """
    Parse the contents of a readme.txt file.

    Args:
        contents: The file contents. Bytes are decoded as UTF-8 with
            invalid sequences replaced. A leading byte order mark is dropped.
        apply_markdown: Convert each section body from Markdown to HTML

    Returns:
        ReadmeDocument, or None if the first line is not a "=== Name ==="
        title and the text therefore isn't a readme.txt of this format.
    """
    if isinstance(contents, bytes):
        contents = contents.decode("utf-8-sig", errors="replace")
    contents = contents.lstrip(BYTE_ORDER_MARK)

    lines = LINE_SPLIT_RE.split(contents.strip(" \t\r\n"))

    match = TITLE_RE.match(lines[0])
    if not match:
        return None

    readme = ReadmeDocument(name=match.group(1))
    position = _parse_headers(lines, 1, readme)

    # The short description is the first line after the header block
    if position < len(lines):
        readme.short_description = lines[position]
        position += 1

    sections = _parse_sections(lines[position:])

    for section_name, body in sections.items():
        if apply_markdown:
            body = render_markdown(body)
        sections[section_name] = _ensure_utf8(body)

    readme.sections = sections
    return readme


def _parse_headers(lines: list[str], position: int, readme: ReadmeDocument) -> int:
    """
    Read "Label: value" lines into readme until a blank line.

    Returns:
        Index of the first line after the header block. The blank line
        that ends the block is consumed.
    """
    while position < len(lines):
        line = lines[position]
        position += 1

        if not line.strip():
            break

        label, _, value = line.partition(":")
        attribute = README_HEADERS.get(label.strip())
        if attribute is None:
            continue

        value = value.strip()
        if attribute in LIST_FIELDS:
            setattr(readme, attribute, _split_list(value))
        else:
            setattr(readme, attribute, value)

    return position


def _split_list(value: str) -> list[str]:
    """Split a comma-separated header value, keeping the listed order."""
    return [piece.strip() for piece in value.split(",") if piece.strip()]


def _parse_sections(lines: list[str]) -> dict[str, str]:
    """
    Group lines under the "== Section ==" header that precedes them.

    Lines before the first section header are dropped. If a header occurs
    twice, the later body replaces the earlier one; the section keeps the
    position where it first appeared.
    """
    sections: dict[str, str] = {}
    current_section: Optional[str] = None
    buffer: list[str] = []

    for line in lines:
        match = SECTION_RE.match(line)
        if match:
            if current_section is not None:
                sections[current_section] = "\n".join(buffer).strip()
            current_section = match.group(1)
            buffer = []
        else:
            buffer.append(line)

    if current_section is not None:
        sections[current_section] = "\n".join(buffer).strip()

    return sections


def _ensure_utf8(text: str) -> str:
    """Replace anything that can't be encoded as UTF-8, like lone surrogates."""
    return text.encode("utf-8", errors="replace").decode("utf-8")
