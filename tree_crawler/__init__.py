"""Tree crawler package.

The package mirrors a remote tree of JSON documents onto local disk:
- `fetcher.py` owns the HTTP client and the "ensure local copy" primitive.
- `parser.py` decodes structural nodes into child references and a label.
- `pool.py` runs a fixed set of fetch workers over a bounded job queue.
- `walker.py` expands the structural tree; `harvest.py` collects the flat
  result/contest documents referenced by the deepest tier.
"""
