"""Backend application package for the simulation workspace API.

This package contains account registration and token authentication,
owner-scoped simulation storage, and the HTTP routes that expose them.
"""
