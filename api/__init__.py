"""
FastAPI RESTful API for the Book Catalog.

This module provides a REST API for:
- Creating, listing, reading, updating and deleting books
- Bearer token authentication on write operations
- MongoDB persistence through Motor
"""
