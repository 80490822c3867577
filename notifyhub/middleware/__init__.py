"""HTTP middleware: request ID propagation.

Applied in main app. Import and use from notifyhub.main.
"""

from notifyhub.middleware.request_id import RequestIDMiddleware, sanitize_request_id

__all__ = [
    "RequestIDMiddleware",
    "sanitize_request_id",
]
