"""metacache: a write-through file metadata cache backed by a chaining hash table"""
