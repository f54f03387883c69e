"""Region and cost-model tuners that choose collective algorithms and protocols, with supporting utilities."""

__version__ = "0.1.0"