"""
SQLite persistence for the submission history.

Modules
-------
connection       ``get_connection()`` context manager.
schema           DDL for the append-only ``history_entries`` table.
history_store    ``HistoryStore`` contract and its SQLite implementation.
repositories     SQL access classes used by the store.
"""
