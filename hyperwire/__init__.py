"""HTTP building blocks: status codes, versions, request targets, streams and a listener pool."""

__version__ = "0.1.0"

__all__ = ["listener", "net", "reasons", "status", "uri", "version"]