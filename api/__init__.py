"""
FastAPI REST API for the Bookshelf catalog.

This module provides:
- Book listing with author, availability, genre and rating filters
- Sorting by rating or year
- Creation, partial update and deletion of books
"""
