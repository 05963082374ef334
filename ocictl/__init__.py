"""ocictl — command-line client for OCI compute and identity."""

__version__ = "0.1.0"
