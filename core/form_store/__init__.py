"""
DUKA Form Store
=================
Relational storage for catalog products and daily form documents.
"""
