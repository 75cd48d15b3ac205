"""
Core components.

This package contains the pieces the API is built on:
- Database handle and identifier quoting
- Startup schema initialization and seeding
- Log table repository
- HTTP middleware (security headers, access logging)
"""
