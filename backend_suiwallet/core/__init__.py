"""
Core utilities: domain exceptions shared by the RPC client, history
pipeline, API server and CLI.
"""
