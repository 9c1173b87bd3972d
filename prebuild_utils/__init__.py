"""Prebuild Utils - build, bundle and publish precompiled native libraries.

This package drives CMake for a named preset, packages the outputs into a
content-addressed bundle keyed by an ABI hash, and uploads the bundle to
S3-compatible object storage.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
