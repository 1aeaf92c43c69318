"""Client for NIP-96 HTTP media servers with NIP-98 request authorization."""

__version__ = "0.1.0"
