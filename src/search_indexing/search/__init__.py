"""
In-memory indexing and query engine.

- analyzers: Split tokenizer and lowercase, length and stop-word filters
- fields: Document field extraction
- postings: Per-index document store with inverted and per-field postings
- query: Additive term-presence scoring, ranking and pagination
- fuzzy: Levenshtein matching for typo-tolerant queries
- locking: Read/write lock guarding one index
- snapshot: JSON export and import
- stats: Index statistics and size estimate
"""
