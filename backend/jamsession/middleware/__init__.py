"""
Jam Session Backend — Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID stored in a ContextVar and echoed back
       in the X-Request-ID response header
    2. Access Log: one line per request with status and duration, tagged
       with the request ID set in step 1
"""
