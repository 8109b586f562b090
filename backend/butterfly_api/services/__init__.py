"""
Butterfly API — Services Layer
================================

What:  Business logic between routes (HTTP) and the JSON database.

Service Inventory:
    - RecordStore: generic query / filter / insert / upsert over one collection
    - ButterflyService: butterflies, users and ratings on top of RecordStore;
      enforces that a rating references an existing user and butterfly
"""
