"""Flask application factory for the py-strictfs JSON API.

The ``create_app`` function builds a ``Filesystem`` rooted at one
directory and returns a Flask app with four endpoints:

- ``GET /api/stat?path=...`` — status record of a file.
- ``POST /api/write`` — ``{"path", "data", "append"?}``; parents are
  created on demand.
- ``POST /api/purge`` — ``{"path", "recursive"?}``.
- ``GET /api/log`` — classified failures recorded so far.

A ``FilesystemError`` becomes a JSON body ``{"error": kind, "message"}``
with a status code chosen by its kind.
"""

from __future__ import annotations

import os
from dataclasses import asdict
from pathlib import PurePosixPath

from flask import Flask, Response, jsonify, request

from py_strictfs.config import FilesystemConfig
from py_strictfs.errors import ErrorKind, FilesystemError
from py_strictfs.filesystem import Filesystem
from py_strictfs.handles import WriteFlags
from py_strictfs.logging import LogLevel

_HTTP_BAD_REQUEST = 400
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409
_HTTP_SERVER_ERROR = 500

_STATUS_BY_KIND = {
    ErrorKind.DOES_NOT_EXIST: _HTTP_NOT_FOUND,
    ErrorKind.PERMISSION_DENIED: _HTTP_FORBIDDEN,
    ErrorKind.ALREADY_EXISTS: _HTTP_CONFLICT,
    ErrorKind.DIRECTORY_NOT_EMPTY: _HTTP_CONFLICT,
    ErrorKind.IS_A_DIRECTORY: _HTTP_BAD_REQUEST,
    ErrorKind.NOT_A_DIRECTORY: _HTTP_BAD_REQUEST,
}

ROOT_ENV_VAR = "STRICTFS_WEB_ROOT"


def status_for(kind: ErrorKind) -> int:
    """Return the HTTP status code reported for an error kind."""
    return _STATUS_BY_KIND.get(kind, _HTTP_SERVER_ERROR)


def _resolve(root: str, relative: object) -> str | None:
    """Join a request path onto *root*, or None if it is not acceptable.

    Only non-empty relative paths without ``..`` components are served.
    """
    if not isinstance(relative, str) or not relative:
        return None
    parts = PurePosixPath(relative)
    if parts.is_absolute() or ".." in parts.parts:
        return None
    return os.path.join(root, *parts.parts)


def _bad_request(message: str) -> tuple[Response, int]:
    return jsonify({"error": "bad_request", "message": message}), _HTTP_BAD_REQUEST


def create_app(root: str | None = None, *, filesystem: Filesystem | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        root: Directory that request paths are relative to.  Defaults to
            ``$STRICTFS_WEB_ROOT``, then the current directory.
        filesystem: Facade to serve; built from the environment if omitted.

    Returns:
        A configured Flask application ready to serve.

    """
    root = root or os.environ.get(ROOT_ENV_VAR) or os.getcwd()
    fs = filesystem or Filesystem(config=FilesystemConfig.from_env())

    app = Flask(__name__)

    @app.errorhandler(FilesystemError)
    def filesystem_error(err: FilesystemError) -> tuple[Response, int]:  # pyright: ignore[reportUnusedFunction]
        """Report a classified failure as JSON."""
        body = {"error": err.kind.value, "message": err.message, "code": err.code}
        return jsonify(body), status_for(err.kind)

    @app.route("/api/stat")
    def stat() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return the status record of ``?path=``."""
        path = _resolve(root, request.args.get("path"))
        if path is None:
            return _bad_request("Missing or invalid 'path' parameter")
        record = fs.stat(path)
        return jsonify(asdict(record))

    @app.route("/api/write", methods=["POST"])
    def write() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Write a file, creating missing parent directories.

        Expects JSON body: ``{"path": "...", "data": "...", "append": false}``
        """
        data = request.get_json(silent=True)
        if data is None or not isinstance(data.get("data"), str):
            return _bad_request("Missing 'data' field")
        path = _resolve(root, data.get("path"))
        if path is None:
            return _bad_request("Missing or invalid 'path' field")
        flags = WriteFlags.APPEND if data.get("append") else WriteFlags.NONE
        written = fs.write_with_auto_create(path, data["data"], flags)
        return jsonify({"bytes_written": written})

    @app.route("/api/purge", methods=["POST"])
    def purge() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Delete a file or directory.

        Expects JSON body: ``{"path": "...", "recursive": false}``
        """
        data = request.get_json(silent=True)
        if data is None:
            return _bad_request("Missing JSON body")
        path = _resolve(root, data.get("path"))
        if path is None:
            return _bad_request("Missing or invalid 'path' field")
        fs.purge(path, recursive=bool(data.get("recursive")))
        return jsonify({"purged": True})

    @app.route("/api/log")
    def log() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return logged failures, optionally from ``?min_level=`` up."""
        if fs.logger is None:
            return jsonify({"entries": []})
        level_name = request.args.get("min_level")
        min_level = None
        if level_name:
            try:
                min_level = LogLevel[level_name.upper()]
            except KeyError:
                return _bad_request(f"Unknown log level {level_name!r}")
        entries = fs.logger.filter(min_level=min_level)
        return jsonify(
            {
                "entries": [
                    {
                        "level": entry.level.name,
                        "message": entry.message,
                        "source": entry.source,
                        "kind": entry.kind,
                    }
                    for entry in entries
                ]
            }
        )

    return app


def main() -> None:
    """Run the API development server.

    This is the ``py-strictfs-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
