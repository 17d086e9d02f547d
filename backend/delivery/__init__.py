"""
Delivery sinks hand an encoded export to the host as a named file.

- DownloadSink: HTTP host, becomes an attachment response
- DirectorySink: terminal host, written into a directory
"""

from .sinks import DeliverySink, DirectorySink, DownloadSink

__all__ = ["DeliverySink", "DirectorySink", "DownloadSink"]
