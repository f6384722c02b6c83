"""
Imports SPL (Structured Product Labeling) XML documents into the
:mod:`labels` models.

A document is walked top down by :mod:`~importer.spl`, which hands each
section to :mod:`~importer.sections`. Section hierarchies are linked by
:mod:`~importer.hierarchy` and product characteristics saved by
:mod:`~importer.characteristics`, each with an incremental and a batch
strategy selected by the ``SPL_USE_BULK_OPERATIONS`` setting. See also
:mod:`~importer.parsers`, :mod:`~importer.namespaces` and
:mod:`~importer.values`.
"""
