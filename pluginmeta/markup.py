"""
readme.txt Markup Conversion

Converts the body of a readme.txt section to HTML. readme.txt files use
standard Markdown plus one custom construct, "= Heading =" lines, which
become level-4 headings (wordpress.org renders changelog and FAQ entries
this way).

This is a best-effort approximation of what wordpress.org displays, not an
exact reproduction.
"""

import re

import markdown


# "= 1.2 =" on a line of its own. Horizontal whitespace only, so that blank
# lines around the heading survive and keep paragraphs apart.
H4_HEADING_RE = re.compile(r"^[ \t]*=[ \t]*(.+?)[ \t]*=[ \t]*$", re.MULTILINE)


def apply_markdown(text: str) -> str:
    """
    Transform readme.txt markup to HTML.

    Args:
        text: Section body

    Returns:
        HTML fragment

    Example:
        >>> apply_markdown("= 1.0 =\\nInitial release.")
        '<h4>1.0</h4>\\n<p>Initial release.</p>'
    """
    text = H4_HEADING_RE.sub(r"<h4>\1</h4>\n", text)
    return markdown.markdown(text)
