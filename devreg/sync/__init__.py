"""Sync — moving stacks between disk, the registry and HTTP responses.

This package provides:
- Readiness: waiting for the registry before anything is pushed
- Push: publishing every indexed stack as an OCI artifact at startup
- Pull: resolving a stack name back into its devfile bytes per request
- Startup: the gated, sequential startup phase and its result
"""
