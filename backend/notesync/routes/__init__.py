# Routes package init
"""
NoteSync Backend — API Routes Package
=======================================

Route Inventory:
    - notes.py:    GET/POST /api/notes, GET /api/notes/view,
                   DELETE /api/notes/{id}
    - files.py:    GET  /api/files/{key}        (signed image locators)
    - session.py:  POST /api/session/sign-out
    - health.py:   GET  /health

Routes stay thin: parse the request, call the workflow, shape the response.
"""
