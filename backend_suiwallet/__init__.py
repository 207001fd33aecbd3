"""
Backend SuiWallet: transaction history and wallet lookups for Sui addresses.

Merges outgoing and incoming transaction streams from a Sui fullnode,
hydrates full transaction detail, and serves globally time-ordered,
display-ready history pages over HTTP and the command line.
"""

__version__ = "0.1.0"
