"""
Android Release - Google Play publishing and release signing.

Publishes APKs and App Bundles to a Play track inside a single edit, or
signs them with zipalign/apksigner and jarsigner.
"""

__version__ = "0.1.0"

__all__ = []
