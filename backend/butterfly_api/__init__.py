"""
Butterfly API — Application Package
=====================================

A small REST API over butterflies, users and their ratings, backed by a
single JSON document.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Validators & Schemas (Contracts)  │  ← field-shape checks, Pydantic
    ├─────────────────────────────────────┤
    │   ButterflyService (Domain Logic)   │  ← rating integrity, sorting
    ├─────────────────────────────────────┤
    │   RecordStore (Flat-Store Access)   │  ← query / filter / insert / upsert
    ├─────────────────────────────────────┤
    │   JSONDatabase (Persistence)        │  ← read at startup, rewrite on change
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
