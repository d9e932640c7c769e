"""
Fake WordPress REST API site and payload builders for tests
"""

import httpx
from typing import Dict, List, Optional

WP_ROOT = "https://blog.test/wp-json"


def wp_user(id: int, name: str, email: Optional[str] = None, slug: Optional[str] = None, **extra) -> Dict:
    user = {"id": id, "name": name, "slug": slug if slug is not None else name.lower().replace(" ", "-")}
    if email is not None:
        user["email"] = email
    user.update(extra)
    return user


def wp_category(id: int, name: str, slug: Optional[str] = None, **extra) -> Dict:
    category = {"id": id, "name": name, "slug": slug if slug is not None else name.lower()}
    category.update(extra)
    return category


def wp_post(
    id: int,
    title: str,
    slug: str,
    content: str = "<p>Long enough body text for an article.</p>",
    status: str = "publish",
    date: str = "2024-01-01T00:00:00",
    categories: Optional[List[int]] = None,
    author: int = 1,
    **extra
) -> Dict:
    post = {
        "id": id,
        "title": {"rendered": title},
        "slug": slug,
        "excerpt": {"rendered": ""},
        "content": {"rendered": content},
        "status": status,
        "date": date,
        "date_gmt": date,
        "modified": date,
        "featured_media": 0,
        "categories": categories if categories is not None else [],
        "author": author,
        "meta": [],
        "sticky": False,
    }
    post.update(extra)
    return post


class FakeWordPress:
    """
    In-memory WordPress site served through httpx.MockTransport.

    Collections are paginated with the per_page/page query parameters and
    report X-WP-TotalPages unless send_total_pages is False.
    """

    def __init__(self):
        self.users: List[Dict] = []
        self.categories: List[Dict] = []
        self.posts: List[Dict] = []
        self.media: Dict[int, Dict] = {}
        self.failing_paths: Dict[str, int] = {}
        self.timeout_paths: List[str] = []
        self.send_total_pages = True
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/wp-json", "", 1)

        if path in self.timeout_paths:
            raise httpx.ReadTimeout("timed out", request=request)
        if path in self.failing_paths:
            return httpx.Response(self.failing_paths[path], text="Internal error from WordPress")

        if path == "/wp/v2":
            return httpx.Response(200, json={"namespace": "wp/v2", "routes": {}})
        if path.startswith("/wp/v2/media/"):
            media_id = int(path.rsplit("/", 1)[1])
            if media_id not in self.media:
                return httpx.Response(404, json={"code": "rest_post_invalid_id"})
            return httpx.Response(200, json=self.media[media_id])

        collections = {
            "/wp/v2/users": self.users,
            "/wp/v2/categories": self.categories,
            "/wp/v2/posts": self.posts,
        }
        if path not in collections:
            return httpx.Response(404, json={"code": "rest_no_route"})

        items = collections[path]
        status = request.url.params.get("status")
        if path == "/wp/v2/posts" and status:
            allowed = status.split(",")
            items = [p for p in items if p.get("status") in allowed]

        per_page = int(request.url.params.get("per_page", 10))
        page = int(request.url.params.get("page", 1))
        total_pages = max(1, -(-len(items) // per_page))
        chunk = items[(page - 1) * per_page:page * per_page]

        headers = {"X-WP-Total": str(len(items))}
        if self.send_total_pages:
            headers["X-WP-TotalPages"] = str(total_pages)
        return httpx.Response(200, json=chunk, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]
