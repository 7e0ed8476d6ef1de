"""
Test suite for mongoconf.

Tests are organized to mirror the package:

- core/config/: registries, layers, the resolver and the typed views
- core/utils/: logging helpers
- cli/: the ``describe`` and ``resolve`` commands
"""
