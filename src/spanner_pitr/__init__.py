"""Point-in-time recovery tooling for Cloud Spanner.

Finds the latest instant at which a predicate query still held against a
database that supports timestamp-bound reads, and exports query results as
they existed at a fixed historical timestamp.
"""

__version__ = "0.1.0"
