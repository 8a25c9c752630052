"""
Source database readers.

One module per source database. Each returns plain dicts keyed by that
source's own join key; translating keys to entity slugs happens in
plaincompare.ingest.
"""
