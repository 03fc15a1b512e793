"""Core Layer — domain types, errors, validation rules and directory queries.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Rule and query-building functions are pure; IO only through protocols
"""
