"""
LabKit data-access package.

Layers, leaf first:

  labdata/entities.py     - records and the wire-JSON codec.
  labdata/repositories/   - pure I/O: the key-value store and named
                            collection files.
  labdata/services/       - facades: observable state plus the operations
                            the UI calls (search, paging, favorites, saved
                            quotes, settings).

``LabKit`` (in ``labkit.py``) is the composition root: it builds one
instance of every client, repository and service and exposes them as public
attributes (e.g. ``kit.quotes``).
"""
