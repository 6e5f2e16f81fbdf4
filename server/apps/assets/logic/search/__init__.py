"""Advanced asset search.

Conditions from a ``SearchRequest`` are compiled into a predicate tree,
combined under AND or OR, wrapped in mandatory scope filters and run
by a ``DataSource``.
"""
