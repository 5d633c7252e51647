# Middleware package init
"""
IP Reverser: Middleware Package
=================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Security Headers] → [CORS] → Route

    Request ID runs first so the access log line and any error log carry
    the correlation ID. Responses unwind in the reverse order.
"""
