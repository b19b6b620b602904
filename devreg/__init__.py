"""devreg — serve devfile stacks out of an OCI registry.

Stacks listed in the registry index are pushed to an OCI distribution
registry at startup and pulled back on demand for every lookup.
"""

__version__ = "0.1.0"
