"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # URLs, query templates, source-format constants
    ├── models.py         # Dataclasses for fetched results
    └── {feature}.py      # Fetch/parse functions (one per concept)

Only ``dart/`` exists today.  Fetch functions take an optional
``requests.Session`` and default to ``fish_passage.services.http.session``
so tests can hand in a stub.
"""
