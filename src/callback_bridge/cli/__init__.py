"""Command line interface for inspecting binding catalogues."""
