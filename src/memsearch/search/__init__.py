"""
Search indexing and query engine package.

This package provides the in-memory search stack:
- analyzers: Tokenizer and filters (cleaning, lowercase, Snowball stemming)
- index: Word -> location -> position inverted index
- models: Search results, scoring and ranking order
- concurrent_index: Thread-safe index with per-word lock striping
- file_indexer: Directory walking and file indexing
- query: Query file parsing, exact/partial search and ranking
- json_writer: Pretty JSON export
"""
