"""
mongoconf - Layered configuration resolution for the MongoDB Spark connector

This package declares the connector's configuration properties and resolves
them against ordered value sources: explicit per-call options, host
settings, environment variables and connection strings.

Key Features:
- Property registries for the shared, input and output namespaces
- Deterministic resolution with per-property provenance
- Typed parsing and validation with fail-fast error reporting
- Nested read preference, read concern and write concern sub-configs
- A Typer CLI to describe registries and explain resolved values

Package Structure:
- core/config/: descriptors, registries, source layers and the resolver
- core/utils/: logging helpers
- cli/: command-line interface
"""

__version__ = "0.3.0"
