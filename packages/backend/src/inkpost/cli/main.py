"""Inkpost CLI — run the server and talk to its GraphQL API.

Usage:
    inkpost serve --reload                       # Run the API with uvicorn
    inkpost init-db                              # Create tables (dev only)
    inkpost signup ada@example.com "Ada" -p pw   # Create an account
    inkpost login ada@example.com -p pw          # Print a token
    inkpost posts --page 2                       # List posts (needs a token)
    inkpost post <post-id>                       # Show one post
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8080"

POST_FIELDS = "id title content imageUrl createdAt updatedAt creator { id name }"


def _api_url() -> str:
    return os.environ.get("INKPOST_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Inkpost backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0, headers=headers)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class GraphQLRequestError(Exception):
    """The server answered with a GraphQL errors list."""

    def __init__(self, errors: list[dict]):
        self.errors = errors
        super().__init__("; ".join(e.get("message", "unknown error") for e in errors))


async def _graphql(
    query: str, variables: Optional[dict] = None, token: Optional[str] = None
) -> dict:
    """POST a GraphQL document and return its data, or raise GraphQLRequestError."""
    async with _client(token) as c:
        r = await c.post("/graphql", json={"query": query, "variables": variables or {}})
        r.raise_for_status()
        body = r.json()
    if body.get("errors"):
        raise GraphQLRequestError(body["errors"])
    return body["data"]


def _run_graphql(query: str, variables: Optional[dict] = None,
                 token: Optional[str] = None) -> dict:
    """Run a GraphQL call from a synchronous Click handler, exiting 1 on errors."""
    try:
        return asyncio.run(_graphql(query, variables, token))
    except GraphQLRequestError as e:
        for err in e.errors:
            status = err.get("status")
            prefix = f"[{status}] " if status else ""
            click.secho(f"Error: {prefix}{err.get('message')}", fg="red", err=True)
            for detail in err.get("data") or []:
                click.secho(f"  - {detail.get('message')}", fg="red", err=True)
        sys.exit(1)
    except httpx.HTTPError as e:
        click.secho(f"Error: could not reach {_api_url()}: {e}", fg="red", err=True)
        sys.exit(1)


def _token(token: Optional[str]) -> str:
    """Resolve token from flag or INKPOST_TOKEN env var."""
    tok = token or os.environ.get("INKPOST_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set INKPOST_TOKEN, see `inkpost login`)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="inkpost")
def main():
    """Inkpost — blog publishing backend."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: INKPOST_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: INKPOST_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from inkpost.config import settings

    uvicorn.run(
        "inkpost.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create all tables directly (use alembic for real deployments)."""
    from inkpost.db.engine import engine
    from inkpost.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create())
    click.secho("Tables created.", fg="green")


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.argument("name")
@click.option("--password", "-p", prompt=True, hide_input=True,
              confirmation_prompt=True)
def signup(email: str, name: str, password: str):
    """Create an account."""
    data = _run_graphql(
        """
        mutation Signup($input: SignupInput!) {
          createUser(signupInput: $input) { id email name status }
        }
        """,
        {"input": {"email": email, "name": name, "password": password}},
    )
    user = data["createUser"]
    click.secho(f"Created user {user['name']} <{user['email']}> ({user['id']})", fg="green")


@main.command()
@click.argument("email")
@click.option("--password", "-p", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print a token (export it as INKPOST_TOKEN)."""
    data = _run_graphql(
        """
        mutation Login($input: LoginInput!) {
          login(loginInput: $input) { token userId }
        }
        """,
        {"input": {"email": email, "password": password}},
    )
    click.echo(data["login"]["token"])


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


@main.command()
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--token", help="Identity token (or set INKPOST_TOKEN)")
def posts(page: int, token: Optional[str]):
    """List posts, newest first."""
    data = _run_graphql(
        f"""
        query Posts($page: Int) {{
          posts(page: $page) {{ totalPosts posts {{ {POST_FIELDS} }} }}
        }}
        """,
        {"page": page},
        token=_token(token),
    )
    result = data["posts"]
    if not result["posts"]:
        click.echo("No posts found.")
        return

    click.secho(f"Posts (page {page}, {result['totalPosts']} total):", bold=True)
    click.echo()
    for p in result["posts"]:
        click.echo(
            f"  {p['id'][:8]}  {p['title'][:40]:40s}  "
            f"by {p['creator']['name']}  {p['createdAt']}"
        )


@main.command()
@click.argument("post_id")
@click.option("--token", help="Identity token (or set INKPOST_TOKEN)")
def post(post_id: str, token: Optional[str]):
    """Show a single post as JSON."""
    data = _run_graphql(
        f"""
        query Post($id: ID!) {{ post(postId: $id) {{ {POST_FIELDS} }} }}
        """,
        {"id": post_id},
        token=_token(token),
    )
    click.echo(_pretty_json(data["post"]))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
