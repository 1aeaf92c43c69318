from urllib.parse import urlsplit


class ProxyPolicy:
    """Decides, per URL, whether a request must go through the proxy.

    With the proxy enabled, onion hosts are always proxied; clearnet hosts
    are proxied unless ``onion_only`` is set.
    """

    def __init__(self, *, enabled: bool, onion_only: bool = False) -> None:
        self._enabled = enabled
        self._onion_only = onion_only

    def __call__(self, url: str) -> bool:
        if not self._enabled:
            return False
        host = (urlsplit(url).hostname or "").lower()
        if host.endswith(".onion"):
            return True
        return not self._onion_only


def never_proxy(url: str) -> bool:
    _ = url
    return False
