#!/usr/bin/env python3
"""
AMA Quickstart — one room, one question, full lifecycle.

Creates a room → posts a question → reacts → un-reacts → marks it answered.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8080

To watch the live events while this runs, open a WebSocket to
ws://localhost:8080/subscribe/<room_id> (e.g. `websocat`) after step 1.
"""

import sys
import time

import httpx

BASE = "http://localhost:8080/api"


def main():
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        print("Start it with:  ama serve")
        sys.exit(1)
    health = resp.json()
    print(f"  Status:   {health['status']}")
    print(f"  Postgres: {health['postgres']}")
    print(f"  Live:     {health['realtime']['listeners']} listener(s)")

    # ── Create room ───────────────────────────────────────────────
    print("\n1. Creating room...")
    resp = client.post("/rooms", json={"theme": "Quickstart AMA"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    room_id = resp.json()["id"]
    print(f"   Room: {room_id}")
    print(f"   Subscribe: ws://localhost:8080/subscribe/{room_id}")
    time.sleep(2)

    # ── Post a question ───────────────────────────────────────────
    print("\n2. Posting a question...")
    resp = client.post(f"/rooms/{room_id}/messages", json={"message": "What's on the roadmap?"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    message_id = resp.json()["id"]
    print(f"   Message: {message_id}")

    # ── Reactions ─────────────────────────────────────────────────
    print("\n3. Reacting twice, then taking one back...")
    react_url = f"/rooms/{room_id}/messages/{message_id}/react"
    for method in ("PATCH", "PATCH", "DELETE"):
        resp = client.request(method, react_url)
        assert resp.status_code == 200, f"Failed: {resp.text}"
        print(f"   {method:<6} → {resp.json()['reaction_count']} reaction(s)")

    # ── Answered ──────────────────────────────────────────────────
    print("\n4. Marking answered...")
    resp = client.patch(f"/rooms/{room_id}/messages/{message_id}/answer")
    assert resp.status_code == 204, f"Failed: {resp.text}"

    # ── Final state ───────────────────────────────────────────────
    resp = client.get(f"/rooms/{room_id}/messages")
    for m in resp.json():
        state = "answered" if m["answered"] else "open"
        print(f"   [{state}] +{m['reaction_count']}  {m['message']}")

    print("\nDone.")


if __name__ == "__main__":
    main()
