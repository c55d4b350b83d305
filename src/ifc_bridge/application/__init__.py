"""Application Layer.

Use cases of the bridge, independent of the transport.
"""
