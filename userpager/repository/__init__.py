"""Repository layer: SQL helpers for the users table (SQLite).

Functions take a connection and stay thin, so the store avoids SQL strings.
"""
