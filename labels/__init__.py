"""
The persisted graph of an SPL document: documents, their sections and the
ordered hierarchy edges between them, and the products, packaging levels and
characteristics declared in those sections.
"""
