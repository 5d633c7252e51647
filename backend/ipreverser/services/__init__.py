# Services package init
"""
IP Reverser: Services Layer
=============================

Service Inventory:
    - ip_service:        extract_client_ip(), reverse_ip(), is_valid_ip()
    - record_store:      RecordStore interface, SqlRecordStore, InMemoryRecordStore
    - reversal_service:  ReversalService, composing the two for one request

Nothing in this package depends on FastAPI routing, so every service can be
exercised with plain dictionaries and an in-memory store.
"""
