#!/usr/bin/env python3
"""Seed demo complaints into a running smart-city backend.

Usage:
    # Start the backend first:
    uvicorn smartcity.web.app:create_app --factory --port 8080

    # Seed demo data:
    python3 scripts/seed_demo_data.py

    # Seed against a different host:
    python3 scripts/seed_demo_data.py --base-url http://localhost:9000

The script logs in as the demo accounts from config/directory_seed.yml and
drives complaints through the public API, so every record passes the same
authorization matrix and validation a real user would hit.

Data created:
    - 6 complaints filed by two citizens in Tunis and Ariana
    - Department routing, technician assignment and progress updates
    - One rejected complaint and one resolved-then-closed complaint
    - Comments from citizens, agents and technicians
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone

import httpx

DEFAULT_BASE_URL = "http://localhost:8080"

DEMO_ACCOUNTS = {
    "amira": ("amira@example.tn", "123456"),
    "karim": ("karim@example.tn", "demo"),
    "agent_tunis": ("agent.tunis@smartcity.tn", "demo"),
    "agent_ariana": ("agent.ariana@smartcity.tn", "demo"),
    "manager_voirie": ("voirie@smartcity.tn", "demo"),
    "tech_mehdi": ("mehdi.tech@smartcity.tn", "demo"),
    "admin": ("admin@smartcity.tn", "000000"),
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def api(
    client: httpx.Client,
    method: str,
    path: str,
    *,
    json: dict | None = None,
    params: dict | None = None,
    token: str | None = None,
) -> dict | list | None:
    """Make an API call and return parsed JSON, or None on failure."""
    headers = {}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    resp = client.request(method, path, json=json, params=params, headers=headers)
    if resp.status_code >= 400:
        print(f"  FAILED {method} {path} -> {resp.status_code}: {resp.text[:200]}")
        return None
    if resp.headers.get("content-type", "").startswith("application/json"):
        return resp.json()
    return None


def section(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def login_all(client: httpx.Client) -> dict[str, str]:
    """Log every demo account in and return their tokens by short name."""
    section("Authentication")
    tokens: dict[str, str] = {}
    for name, (email, code) in DEMO_ACCOUNTS.items():
        result = api(client, "POST", "/api/auth/login", json={"email": email, "code": code})
        if result and result.get("success"):
            tokens[name] = result["token"]
            print(f"  {result.get('display_name', email)} ({result.get('role')})")
        else:
            print(f"  WARNING: login failed for {email}")
    return tokens


# ---------------------------------------------------------------------------
# Complaints
# ---------------------------------------------------------------------------

DEMO_COMPLAINTS = [
    {
        "owner": "amira",
        "title": "Nid de poule avenue Habib Bourguiba",
        "description": "Large pothole in the right lane, cars swerve into oncoming traffic.",
        "category": "ROAD",
        "urgency": "HIGH",
        "governorate": "Tunis",
        "municipality": "Le Bardo",
        "location": {"latitude": 36.8092, "longitude": 10.1348, "address": "Av. Habib Bourguiba"},
    },
    {
        "owner": "amira",
        "title": "Lampadaire en panne",
        "description": "Street light out for two weeks near the school entrance.",
        "category": "LIGHTING",
        "urgency": "MEDIUM",
        "governorate": "Tunis",
        "municipality": "Le Bardo",
    },
    {
        "owner": "amira",
        "title": "Depot sauvage de dechets",
        "description": "Construction rubble dumped on the sidewalk overnight.",
        "category": "WASTE",
        "urgency": "LOW",
        "governorate": "Tunis",
        "municipality": "Le Bardo",
        "is_anonymous": True,
    },
    {
        "owner": "karim",
        "title": "Fuite d'eau rue de Marseille",
        "description": "Water main leaking, the street is flooded every morning.",
        "category": "WATER",
        "urgency": "URGENT",
        "governorate": "Ariana",
        "municipality": "La Soukra",
    },
    {
        "owner": "karim",
        "title": "Bruit de chantier la nuit",
        "description": "Construction site working after midnight.",
        "category": "NOISE",
        "urgency": "MEDIUM",
        "governorate": "Ariana",
        "municipality": "La Soukra",
    },
    {
        "owner": "karim",
        "title": "Banc casse au jardin public",
        "description": "Broken bench with exposed nails in the public garden.",
        "category": "PUBLIC_PROPERTY",
        "urgency": "LOW",
        "governorate": "Ariana",
        "municipality": "La Soukra",
    },
]


def seed_complaints(client: httpx.Client, tokens: dict[str, str]) -> list[dict]:
    section("Complaints")
    created = []
    for data in DEMO_COMPLAINTS:
        payload = {k: v for k, v in data.items() if k != "owner"}
        result = api(client, "POST", "/api/complaints", json=payload, token=tokens.get(data["owner"]))
        if result:
            created.append(result)
            print(f"  {result['id'][:8]}  {result['title']} (score {result['priority_score']})")
    return created


def progress_complaints(client: httpx.Client, tokens: dict[str, str], complaints: list[dict]) -> None:
    section("Workflow")
    if len(complaints) < len(DEMO_COMPLAINTS):
        print("  Skipping workflow: not every complaint was created")
        return
    pothole, light, dump, leak, noise, bench = (c["id"] for c in complaints)
    agent, agent_ariana = tokens.get("agent_tunis"), tokens.get("agent_ariana")
    manager, tech = tokens.get("manager_voirie"), tokens.get("tech_mehdi")

    # Pothole: routed to roads, assigned, worked, resolved, closed
    api(client, "POST", f"/api/complaints/{pothole}/department",
        json={"department_id": "dept-voirie"}, token=agent)
    api(client, "POST", f"/api/complaints/{pothole}/assign",
        json={"assigned_to": "tech-mehdi"}, token=manager)
    api(client, "PATCH", f"/api/complaints/{pothole}/status",
        json={"status": "IN_PROGRESS"}, token=manager)
    api(client, "POST", f"/api/complaints/{pothole}/comments",
        json={"text": "Crew on site, cold patch applied."}, token=tech)
    api(client, "PATCH", f"/api/complaints/{pothole}/status",
        json={"status": "RESOLVED"}, token=manager)
    api(client, "PATCH", f"/api/complaints/{pothole}/status",
        json={"status": "CLOSED"}, token=agent)
    print("  Pothole: routed, assigned, resolved and closed")

    # Street light: routed to lighting and validated
    api(client, "POST", f"/api/complaints/{light}/department",
        json={"department_id": "dept-eclairage"}, token=agent)
    print("  Street light: routed to Eclairage Public")

    # Dump: rejected as duplicate
    api(client, "PATCH", f"/api/complaints/{dump}/status",
        json={"status": "REJECTED", "rejection_reason": "Duplicate of an existing report"}, token=agent)
    print("  Rubble dump: rejected as duplicate")

    # Leak: urgent, bumped to top priority by the Ariana agent
    api(client, "PATCH", f"/api/complaints/{leak}/priority",
        json={"priority_score": 10}, token=agent_ariana)
    api(client, "POST", f"/api/complaints/{leak}/department",
        json={"department_id": "dept-eau"}, token=agent_ariana)
    print("  Water leak: prioritized and routed to Eau et Assainissement")

    # Noise and bench stay SUBMITTED; citizens follow up
    api(client, "POST", f"/api/complaints/{noise}/comments",
        json={"text": "Still happening every night this week."}, token=tokens.get("karim"))
    print(f"  Noise and bench ({bench[:8]}) left in the intake queue")


def verify_data(client: httpx.Client, tokens: dict[str, str]) -> None:
    """Print a summary of seeded data as the admin sees it."""
    section("Verification Summary")
    admin = tokens.get("admin")
    stats = api(client, "GET", "/api/complaints/stats", token=admin)
    if stats:
        print(f"  Total complaints: {stats.get('total', 0)}")
        for status, count in stats.get("by_status", {}).items():
            print(f"    {status:<12} {count}")
    notifications = api(client, "GET", "/api/notifications", token=admin)
    print(f"  Admin inbox:      {len(notifications) if notifications else 0}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Seed demo complaints into a running smart-city backend"
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Backend base URL (default: {DEFAULT_BASE_URL})",
    )
    args = parser.parse_args()

    print("Smart City Demo Data Seeder")
    print(f"Target: {args.base_url}")
    print(f"Time:   {datetime.now(timezone.utc).isoformat()}")

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        try:
            health = api(client, "GET", "/health")
        except httpx.ConnectError:
            health = None
        if not health:
            print(f"\nERROR: Cannot reach {args.base_url}. Start the backend first:")
            print("  uvicorn smartcity.web.app:create_app --factory --port 8080")
            sys.exit(1)

        print(f"Backend: {health.get('service', 'unknown')} ({health.get('details', {}).get('storage')})")

        tokens = login_all(client)
        complaints = seed_complaints(client, tokens)
        progress_complaints(client, tokens, complaints)
        verify_data(client, tokens)

        section("Done")
        print("  Demo data seeded successfully!")
        print("  In-memory storage resets when the server restarts.")
        print()


if __name__ == "__main__":
    main()
