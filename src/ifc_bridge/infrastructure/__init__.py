"""Infrastructure Layer.

Host adapters, IFC tooling and web app discovery.
"""
