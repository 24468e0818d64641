#!/usr/bin/env python3
"""
Inkpost Quickstart — full post lifecycle in one script.

Signs up two users → uploads an image → creates posts → pages through
them → shows that only the author can edit or delete.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8080
"""

import httpx

from _common import BASE, authenticate, check_backend, gql

POST_FIELDS = "id title content imageUrl createdAt creator { id name }"

# Smallest valid PNG header; enough for the upload endpoint's type check
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def main():
    check_backend()

    # ── Users ─────────────────────────────────────────────────────
    print("\n1. Signing up two authors...")
    ada_token, ada_id = authenticate("Ada")
    bob_token, _ = authenticate("Bob")
    print(f"   Ada: {ada_id[:8]}...")

    # ── Image upload (REST) ───────────────────────────────────────
    print("\n2. Uploading a cover image...")
    resp = httpx.put(
        f"{BASE}/post-image",
        files={"image": ("cover.png", PNG, "image/png")},
        headers={"Authorization": f"Bearer {ada_token}"},
        timeout=10,
    )
    assert resp.status_code == 201, f"Failed: {resp.text}"
    image_path = resp.json()["filePath"]
    print(f"   Stored at {image_path}")

    # ── Posts ─────────────────────────────────────────────────────
    print("\n3. Creating posts...")
    post_ids = []
    for i in range(3):
        data = gql(
            f"""
            mutation($input: PostInput!) {{ createPost(postInput: $input) {{ {POST_FIELDS} }} }}
            """,
            {"input": {
                "title": f"Field notes #{i + 1}",
                "content": "Lorem ipsum dolor sit amet.",
                "imageUrl": image_path if i == 0 else None,
            }},
            token=ada_token,
        )
        post = data["createPost"]
        post_ids.append(post["id"])
        print(f"   {post['title']} ({post['id'][:8]}...) at {post['createdAt']}")

    print("\n4. Paging through posts...")
    page = 1
    while True:
        data = gql(
            f"""
            query($page: Int) {{ posts(page: $page) {{ totalPosts posts {{ {POST_FIELDS} }} }} }}
            """,
            {"page": page},
            token=ada_token,
        )
        posts = data["posts"]["posts"]
        if not posts:
            break
        print(f"   Page {page}: {[p['title'] for p in posts]} (total {data['posts']['totalPosts']})")
        page += 1

    # ── Ownership ─────────────────────────────────────────────────
    print("\n5. Bob tries to edit Ada's post...")
    resp = httpx.post(
        f"{BASE}/graphql",
        json={
            "query": """
                mutation($id: ID!, $input: PostInput!) {
                  updatePost(postId: $id, postInput: $input) { id }
                }
            """,
            "variables": {"id": post_ids[0], "input": {"title": "Mine now", "content": "!"}},
        },
        headers={"Authorization": f"Bearer {bob_token}"},
        timeout=10,
    )
    error = resp.json()["errors"][0]
    print(f"   Rejected: [{error['status']}] {error['message']}")

    print("\n6. Ada deletes her last post...")
    data = gql(
        "mutation($id: ID!) { deletePost(postId: $id) }",
        {"id": post_ids[-1]},
        token=ada_token,
    )
    print(f"   Deleted: {data['deletePost']}")

    print("\nDone.")


if __name__ == "__main__":
    main()
