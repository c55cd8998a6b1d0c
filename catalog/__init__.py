"""
Book catalog core: store gateway, query builder and payload validation.
"""
