# Services package init
"""
NoteSync Backend — Services Layer
===================================

Service Inventory:
    - RecordStore (abstract): note records (list / create / delete)
      - GraphQLRecordStore: managed GraphQL API
      - DatabaseRecordStore: async SQLAlchemy
    - BlobStore (abstract): image objects (put / get_locator / remove)
      - LocalBlobStore: filesystem + signed locators
    - NoteSyncWorkflow: List / Create / Delete orchestration
    - SessionRegistry: bearer-token gate and per-session displayed lists
"""
