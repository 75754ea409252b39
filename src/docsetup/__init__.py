"""docsetup: environment setup and build validation for the MkDocs documentation."""

__version__ = "1.0.0"
__all__ = ["__version__"]
