"""
Core cross-cutting pieces shared by the client, extractors, store and sync layers.
"""
