"""
Session lifecycle engine for the interview runtime.

Includes:
- SessionFactory: creates and registers new sessions
- TranscriptRecorder: appends prompts / responses to a session
- status_machine: the created -> speaking <-> waiting -> completed table
- statistics: duration / latency figures frozen at termination
- RetentionManager: deferred eviction of completed sessions
"""
