# CLI package for arrayorm
"""
Read-only CLI for querying JSON record files.

Commands:
    arrayorm query    Filter, deduplicate, sort and project records
    arrayorm join     Attach related records (one-to-many)
"""
