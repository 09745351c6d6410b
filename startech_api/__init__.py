"""
Top‑level package for the Startech management API.

This file makes ``startech_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``startech_api.app.main``.  Tests and the ``run.py`` launcher rely on
those names when they are executed from the project root.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
