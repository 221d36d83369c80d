"""
Core utilities shared across the social API.

Configuration lives here; routers and the storage layer depend on these
primitives instead of reading the environment themselves.
"""
