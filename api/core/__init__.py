"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks the HTTP layer is wired from: settings,
the embedded store, persistence, the fault taxonomy and the audit sink.
Request handling itself lives in `query/`.
"""
