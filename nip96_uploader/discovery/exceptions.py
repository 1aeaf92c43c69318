class DiscoveryError(Exception):
    """Raised when a server's NIP-96 descriptor cannot be fetched or parsed."""
