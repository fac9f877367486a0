"""
Storage abstractions for the interview runtime.

Includes:
- SessionStore: process-wide, in-memory, per-session locked session table
"""
