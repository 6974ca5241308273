"""tipbase - knowledge base service with change tracking."""

__version__ = "0.1.0"
