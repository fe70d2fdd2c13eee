"""dbcatalog - Catalog database schemas into JSON, XML or a reviewable file tree."""

__version__ = "0.1.0"
