"""
AppLog - client log message store

A FastAPI service that writes submitted log messages to a PostgreSQL table,
creating the database, table and a seed row on startup.
"""

__version__ = "0.1.0"
