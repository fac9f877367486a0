"""
Runtime package for the interview avatar server.

This package contains:
- API layer (FastAPI server + routes)
- Agents (InterviewCoordinator wiring lifecycle + external clients)
- Lifecycle (session factory, transcript recorder, status machine,
  statistics, retention)
- Stores (in-memory sessions)
- Models (Pydantic models for sessions and HTTP payloads)
"""
