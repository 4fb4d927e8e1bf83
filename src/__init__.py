"""
Expense Tracker - Source Package

A single-page expense tracker backed by a remote expense API.

DESIGN PRINCIPLES:
1. The server is authoritative; the client holds a cached copy
2. Fail visibly: a load error blocks the page, a submit error alerts
3. No silent retries
4. Every cache write is an explicit command
5. Storage and transport are injectable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
