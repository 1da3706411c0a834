"""
NoteSync Backend — Application Package
========================================

A note-taking client backend: notes (name, description, optional image) are
kept in a record store, images in a blob store, and each signed-in session
sees its own displayed list.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   NoteSyncWorkflow (orchestration)  │  ← List / Create / Delete
    ├─────────────────────────────────────┤
    │  RecordStore        │   BlobStore   │  ← external collaborators
    │ (GraphQL / SQL)     │  (filesystem) │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
