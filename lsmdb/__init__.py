"""Relational core of an LSM-tree database: schemas, row encoding and query operators."""

__version__ = "0.1.0"