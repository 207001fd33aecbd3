"""
API server package: HTTP/REST interface.

Exposes address history pages, balances, transaction details and the
searched-address list. Delegates to the history service and database layer.
"""
