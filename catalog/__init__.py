"""
Petro-Core catalog pipeline.

Fetches rock and mineral specimens from the hosted store, collapses duplicate
records, applies free-text search and facet filters, and projects the result
into display items for the catalog views.
"""

__version__ = "1.0.0"
