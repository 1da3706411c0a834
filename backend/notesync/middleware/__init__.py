# Middleware package init
"""
NoteSync Backend — Middleware Package
=======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: generate the correlation ID before anything logs
    2. Logging: log request details tagged with that ID
"""
