"""
Top‑level package for the LinkLeaf API.

This file makes ``linkleaf_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``linkleaf_api.app.main``.  The package provides no public exports;
all functionality lives in submodules under ``app``.
"""

__all__ = []
