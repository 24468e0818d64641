"""
Shared helpers for Inkpost examples.

Handles the health check, signup + login, and GraphQL calls so each
example can focus on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8080"


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  inkpost init-db && inkpost serve --reload")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    if health["database"] != "ok":
        print(f"\nERROR: Database is not reachable: {health['database']}")
        sys.exit(1)


def gql(query: str, variables: dict | None = None, token: str | None = None) -> dict:
    """Run a GraphQL operation and return its data, exiting on errors."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    resp = httpx.post(
        f"{BASE}/graphql",
        json={"query": query, "variables": variables or {}},
        headers=headers,
        timeout=10,
    )
    body = resp.json()
    if body.get("errors"):
        for err in body["errors"]:
            print(f"ERROR [{err.get('status')}]: {err['message']}")
        sys.exit(1)
    return body["data"]


def authenticate(name: str = "Demo User") -> tuple[str, str]:
    """Sign up a fresh user and log in, returning (token, user_id).

    Uses a unique email per run so examples are idempotent.
    """
    run_id = uuid.uuid4().hex[:8]
    email = f"demo-{run_id}@example.com"
    password = "demo-password-123"

    gql(
        """
        mutation($input: SignupInput!) { createUser(signupInput: $input) { id } }
        """,
        {"input": {"email": email, "name": f"{name} {run_id}", "password": password}},
    )
    data = gql(
        """
        mutation($input: LoginInput!) { login(loginInput: $input) { token userId } }
        """,
        {"input": {"email": email, "password": password}},
    )
    return data["login"]["token"], data["login"]["userId"]
