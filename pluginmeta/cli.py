"""
pluginmeta Command-Line Interface

This module provides the CLI entry point for pluginmeta. It runs the
pipeline on a single package: scan -> parse -> normalize -> output.

Usage:
    pluginmeta my-plugin.zip
    pluginmeta my-plugin.zip --raw
    pluginmeta my-plugin.zip --output meta.json
    pluginmeta my-plugin.zip --no-markdown --verbose

Output is JSON. By default it is the update checker metadata; --raw prints
the parsed plugin header and readme.txt instead.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from pluginmeta import __version__
from pluginmeta.normalizer import normalize_package_info
from pluginmeta.scanner import ScanOptions, analyse_package


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="pluginmeta",
        description=(
            "pluginmeta: Extract plugin metadata from a plugin ZIP package.\n\n"
            "Reads the plugin header of the main PHP file and the readme.txt "
            "and prints the result as JSON."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  pluginmeta my-plugin.zip                 # Update checker metadata\n"
            "  pluginmeta my-plugin.zip --raw           # Parsed header and readme.txt\n"
            "  pluginmeta my-plugin.zip -o meta.json    # Write to a file\n"
            "  pluginmeta my-plugin.zip --no-markdown   # Keep sections as plain text\n"
        ),
    )

    parser.add_argument(
        "package",
        type=str,
        help="Path to the plugin's ZIP archive",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Write JSON to this file instead of stdout",
    )

    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print the parsed header, readme and plugin file instead of normalized metadata",
    )

    parser.add_argument(
        "--markdown",
        dest="markdown",
        action="store_true",
        default=None,
        help="Convert readme sections to HTML (default for normalized output)",
    )

    parser.add_argument(
        "--no-markdown",
        dest="markdown",
        action="store_false",
        help="Keep readme sections as plain text (default for --raw)",
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )

    # Verbosity
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed progress information",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log(message: str, quiet: bool = False) -> None:
    """Print a status message to stderr."""
    if not quiet:
        print(f"[pluginmeta] {message}", file=sys.stderr)


def log_verbose(message: str, verbose: bool, quiet: bool) -> None:
    """Print a message only in verbose mode."""
    if verbose and not quiet:
        print(f"  {message}", file=sys.stderr)


def run_pipeline(
    package_path: Path,
    output_path: Optional[Path],
    options: ScanOptions,
    raw: bool = False,
    indent: int = 2,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """
    Analyse a package and write its metadata as JSON.

    Args:
        package_path: Path to the plugin ZIP archive
        output_path: Where to write the JSON (None = stdout)
        options: Scanning options
        raw: Output the parsed PackageInfo instead of PackageMeta
        indent: JSON indentation
        verbose: If True, show detailed progress
        quiet: If True, suppress non-error output

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    if not package_path.is_file():
        print(f"Error: File does not exist: {package_path}", file=sys.stderr)
        return 1

    log(f"Analysing {package_path.name}...", quiet=quiet)

    info = analyse_package(package_path, options=options)
    if info is None:
        print(
            f"Error: Not a plugin package (not a ZIP archive, or no plugin header found): {package_path}",
            file=sys.stderr,
        )
        return 1

    log_verbose(f"Plugin file: {info.plugin_file}", verbose, quiet)
    log_verbose(f"Plugin name: {info.header.name}", verbose, quiet)
    if info.header.version:
        log_verbose(f"Version: {info.header.version}", verbose, quiet)
    if info.readme is None:
        log_verbose("No readme.txt found", verbose, quiet)
    else:
        log_verbose(f"Readme sections: {', '.join(info.readme.sections) or '(none)'}", verbose, quiet)

    for warning in info.warnings:
        log(f"Warning: {warning}", quiet=quiet)

    data = info.to_dict() if raw else normalize_package_info(info).to_dict()
    content = json.dumps(data, indent=indent, ensure_ascii=False)

    if output_path is None:
        print(content)
        return 0

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content + "\n")
    except IOError as e:
        print(f"Error writing file: {e}", file=sys.stderr)
        return 1

    log(f"Metadata written to: {output_path}", quiet=quiet)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Normalized metadata carries HTML sections, raw output plain text,
    # unless the user says otherwise
    apply_markdown = args.markdown if args.markdown is not None else not args.raw

    return run_pipeline(
        package_path=Path(args.package),
        output_path=Path(args.output) if args.output else None,
        options=ScanOptions(apply_markdown=apply_markdown),
        raw=args.raw,
        indent=args.indent,
        verbose=args.verbose,
        quiet=args.quiet,
    )


if __name__ == "__main__":
    sys.exit(main())
