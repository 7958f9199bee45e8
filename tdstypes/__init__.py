"""Encoding and decoding of SQL Server TDS wire data types: type ids, TYPE_INFO, values and metadata."""

__version__ = "0.1.0"

__all__ = [
    "metadata",
    "numeric",
    "reader",
    "temporal",
    "typeids",
    "typeinfo",
    "uniqueidentifier",
]