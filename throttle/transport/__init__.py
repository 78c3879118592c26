"""
Transport Package

HTTP-layer integration.
"""

from throttle.transport.limiting_transport import LimitingTransport, is_payload_request

__all__ = [
    "LimitingTransport",
    "is_payload_request",
]
