"""Registry — the stack catalog and its mapping onto OCI artifacts.

The registry layer provides:
- Index: the immutable catalog of stack descriptors loaded at startup
- References: the registry-side key each stack is stored under
- Media types: the content and config types every artifact carries
- Errors: the failure taxonomy shared by the push and pull paths
"""
