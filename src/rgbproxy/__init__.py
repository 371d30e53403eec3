"""RGB proxy server: consignment and media relay with one-shot acknowledgments."""

__version__ = "0.3.0"

PROTOCOL_VERSION = "0.2"
