#!/usr/bin/env python3
"""
Interview runtime CLI

Commands:

1) serve
   - Start the interview runtime server (uvicorn on runtime.api.server:app).

2) sessions
   - List the sessions held by a running server (id, status, createdAt).

3) status <session_id>
   - Print status and transcript of one session.

4) results <session_id>
   - Print the frozen results of a completed session.

Remote commands talk to the server over HTTP; the server keeps every
session in memory only, so they see nothing once it restarts.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

# Ensure project root is on sys.path when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from configs.settings import settings


def _default_server_url() -> str:
    return f"http://{settings.host}:{settings.port}"


def _get_json(server_url: str, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """GET a runtime endpoint and return its success envelope, or exit on failure."""
    url = f"{server_url.rstrip('/')}{path}"
    try:
        resp = httpx.get(url, params=params, timeout=10.0)
    except httpx.ConnectError:
        print(f"[Interview] Could not connect to server at {server_url}", file=sys.stderr)
        sys.exit(1)

    try:
        data = resp.json()
    except ValueError:
        print(f"[Interview] HTTP {resp.status_code}: non-JSON response", file=sys.stderr)
        sys.exit(1)

    if not data.get("success", False):
        print(
            f"[Interview] {data.get('error', 'Error')}: {data.get('detail', resp.reason_phrase)}",
            file=sys.stderr,
        )
        sys.exit(1)
    return data


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_serve(host: str, port: int, reload: bool) -> None:
    import uvicorn

    print(f"[Interview] Starting runtime on http://{host}:{port}")
    uvicorn.run("runtime.api.server:app", host=host, port=port, reload=reload)


def cmd_sessions(server_url: str) -> None:
    data = _get_json(server_url, "/api/session/start")
    sessions = data.get("sessions", [])
    if not sessions:
        print("[Interview] No sessions")
        return
    for session in sessions:
        print(f"{session['id']}  {session['status']:<10}  {session['createdAt']}")
    print(f"[Interview] {data.get('activeSessions', len(sessions))} session(s)")


def cmd_status(server_url: str, session_id: str) -> None:
    _print_json(_get_json(server_url, "/api/session/status", {"sessionId": session_id}))


def cmd_results(server_url: str, session_id: str) -> None:
    data = _get_json(server_url, "/api/session/end", {"sessionId": session_id})
    _print_json(data["results"])


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interview runtime CLI")
    parser.add_argument(
        "--server-url",
        default=_default_server_url(),
        help="Base URL of a running server (default: INTERVIEW_HOST / INTERVIEW_PORT)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subparsers.add_parser("serve", help="Start the runtime server")
    p_serve.add_argument("--host", default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)
    p_serve.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # sessions
    subparsers.add_parser("sessions", help="List sessions on a running server")

    # status
    p_status = subparsers.add_parser("status", help="Show status and transcript of a session")
    p_status.add_argument("session_id")

    # results
    p_results = subparsers.add_parser("results", help="Show results of a completed session")
    p_results.add_argument("session_id")

    return parser


def main(argv: Optional[list] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    command: str = args.command

    if command == "serve":
        cmd_serve(host=args.host, port=args.port, reload=args.reload)
    elif command == "sessions":
        cmd_sessions(server_url=args.server_url)
    elif command == "status":
        cmd_status(server_url=args.server_url, session_id=args.session_id)
    elif command == "results":
        cmd_results(server_url=args.server_url, session_id=args.session_id)
    else:
        parser.error(f"Unknown command: {command}")


if __name__ == "__main__":
    main()
