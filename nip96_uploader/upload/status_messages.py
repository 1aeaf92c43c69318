"""Human-readable explanations for HTTP status codes returned by media servers."""

from types import MappingProxyType

DEFAULT_STATUS_MESSAGES = MappingProxyType(
    {
        400: "Bad request: the server could not understand the request",
        401: "Unauthorized: the server requires a valid authorization",
        402: "Payment required: this server requires a paid plan",
        403: "Forbidden: the server refused the request",
        404: "Not found: the endpoint or file does not exist",
        405: "Method not allowed: the server does not accept this operation",
        408: "Request timeout: the server gave up waiting for the file",
        409: "Conflict: the file already exists or is being modified",
        411: "Length required: the server needs the exact file size",
        413: "Payload too large: the file exceeds the server's size limit",
        415: "Unsupported media type: the server does not accept this file type",
        429: "Too many requests: try again later",
        500: "Internal server error",
        501: "Not implemented: the server does not support this operation",
        502: "Bad gateway: the server's upstream failed",
        503: "Service unavailable: the server is overloaded or down",
        504: "Gateway timeout: the server's upstream did not respond",
        507: "Insufficient storage: the server is out of space",
    }
)
