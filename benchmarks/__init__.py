"""
Benchmark suite for jtree.

Compares parsing and serialization against:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

and measures the struct mapping layer on its own.
"""
