"""
Flask-based Web API for pluginmeta.

Provides REST endpoints that extract metadata from an uploaded plugin ZIP.

Endpoints:
    POST /api/metadata - Update checker metadata for an uploaded package
    POST /api/analyze - Parsed plugin header and readme.txt
    GET /api/health - Health check endpoint

Uploads are written to a temporary directory that is removed once the
request has been handled, whether or not analysis succeeded.

Environment Variables:
    - PLUGINMETA_MAX_UPLOAD_MB: Maximum upload size in MB (default: 50)
    - PLUGINMETA_APPLY_MARKDOWN: Default for the "markdown" query
      parameter (default: true)
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from flask import Flask, Response, jsonify, request

from pluginmeta import __version__
from pluginmeta.normalizer import normalize_package_info
from pluginmeta.scanner import ScanOptions, analyse_package
from pluginmeta.schema import PackageInfo

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = int(os.environ.get("PLUGINMETA_MAX_UPLOAD_MB", "50")) * 1024 * 1024
app.config["APPLY_MARKDOWN"] = os.environ.get("PLUGINMETA_APPLY_MARKDOWN", "true").lower() == "true"


def save_upload(uploaded_file, target_dir: Path) -> Path:
    """
    Save an uploaded package to a directory.

    Args:
        uploaded_file: The uploaded file object.
        target_dir: The directory to save into.

    Returns:
        Path of the saved file.

    Raises:
        ValueError: If no file was selected or it isn't a .zip file.
    """
    if not uploaded_file.filename:
        raise ValueError("No file selected")

    if not uploaded_file.filename.lower().endswith(".zip"):
        raise ValueError("Only .zip files are supported")

    # The client's filename is not used on disk
    package_path = target_dir / "package.zip"
    uploaded_file.save(str(package_path))
    return package_path


def _markdown_requested() -> bool:
    """Read the "markdown" query parameter, falling back to the app config."""
    default = "true" if app.config["APPLY_MARKDOWN"] else "false"
    return request.args.get("markdown", default).lower() == "true"


def _analyse_upload(apply_markdown: bool) -> tuple[Optional[PackageInfo], Optional[tuple[Response, int]]]:
    """
    Run the scanner on the uploaded package.

    Returns:
        (PackageInfo, None) on success, or (None, error response).
    """
    if "file" not in request.files:
        return None, (jsonify({"error": "A 'file' upload is required"}), 400)

    with tempfile.TemporaryDirectory() as tmpdir:
        try:
            package_path = save_upload(request.files["file"], Path(tmpdir))
        except ValueError as e:
            return None, (jsonify({"error": str(e)}), 400)

        info = analyse_package(package_path, options=ScanOptions(apply_markdown=apply_markdown))

    if info is None:
        return None, (
            jsonify({"error": "Not a plugin package: no valid plugin header found in the archive"}),
            422,
        )
    return info, None


@app.route("/api/health", methods=["GET"])
def health_check() -> Response:
    """Health check endpoint."""
    return jsonify({"status": "healthy", "version": __version__})


@app.route("/api/metadata", methods=["POST"])
def get_metadata() -> tuple[Response, int]:
    """
    Extract update checker metadata from an uploaded plugin package.

    Request:
        multipart/form-data with a 'file' field containing a .zip

    Optional query parameters:
        - markdown: bool (default: true) - render readme sections as HTML

    Returns:
        JSON response with:
            - metadata: PackageMeta fields that could be determined
            - warnings: Non-fatal problems found while scanning
    """
    info, error = _analyse_upload(_markdown_requested())
    if error is not None:
        return error

    response_data: dict[str, Any] = {
        "success": True,
        "metadata": normalize_package_info(info).to_dict(),
        "warnings": info.warnings,
    }
    return jsonify(response_data), 200


@app.route("/api/analyze", methods=["POST"])
def analyze_package() -> tuple[Response, int]:
    """
    Return the parsed plugin header and readme.txt of an uploaded package.

    Same input as /api/metadata. Useful for integrations that want the
    unprocessed fields (contributors, tags, short description, ...).
    """
    info, error = _analyse_upload(_markdown_requested())
    if error is not None:
        return error

    response_data: dict[str, Any] = {
        "success": True,
        "package": info.to_dict(),
        "warnings": info.warnings,
    }
    return jsonify(response_data), 200


@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle file too large errors."""
    limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
    return jsonify({"error": f"File too large. Maximum size is {limit_mb}MB."}), 413


@app.errorhandler(500)
def internal_server_error(error):
    """Handle internal server errors."""
    return jsonify({"error": "Internal server error"}), 500


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Configured Flask application instance.
    """
    return app


def main() -> None:
    """Run the development server."""
    print("Starting pluginmeta API server...")
    print()
    print("API Endpoints:")
    print("  POST /api/metadata - Update checker metadata for an uploaded .zip")
    print("  POST /api/analyze  - Parsed plugin header and readme.txt")
    print("  GET  /api/health   - Health check")
    print()
    app.run(host="127.0.0.1", port=5001, debug=False)


if __name__ == "__main__":
    main()
