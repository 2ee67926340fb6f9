"""
pluginmeta - Plugin metadata extraction from distribution packages.

Reads a WordPress-style plugin ZIP archive, parses the plugin header of its
main PHP file and its readme.txt, and produces normalized metadata for
plugin update checkers.
"""

__version__ = "0.1.0"
