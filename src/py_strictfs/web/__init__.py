"""JSON web API for py-strictfs.

This package provides a Flask application that exposes a ``Filesystem``
rooted at one directory over HTTP.  It is an **optional** extra —
install with::

    pip install py-strictfs[web]

The ``create_app`` factory in ``app.py`` serves four endpoints:

- ``GET /api/stat`` — status record of a path.
- ``POST /api/write`` — write a file, creating missing directories.
- ``POST /api/purge`` — delete a file or directory.
- ``GET /api/log`` — the failure audit log.
"""
