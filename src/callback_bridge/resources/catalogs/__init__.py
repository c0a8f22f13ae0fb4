"""YAML catalogues of callback-style host namespaces."""
