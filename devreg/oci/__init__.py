"""Minimal OCI distribution client — blobs and manifests over HTTP."""
