class TransportError(Exception):
    """Raised when a request fails at the network level (connect, TLS, timeout, proxy)."""
