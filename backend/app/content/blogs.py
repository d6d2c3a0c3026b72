# backend/app/content/blogs.py
"""
Blog posts, kept in memory per app instance and seeded with sample posts.
Backs /api/blogs and the admin blog editor.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from app.core.utils import epoch_ms, iso_now, read_time, today_stamp


class ContentError(Exception):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlogPost(BaseModel):
    id: str
    title: str
    excerpt: str = ""
    content: str
    author: str
    publishDate: str
    readTime: str
    image: str = ""
    tags: List[str] = Field(default_factory=list)
    featured: bool = False
    published: bool = False
    created_at: str
    updated_at: str


SEED_POSTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "title": "The Future of VLSI Design and Semiconductor Technology",
        "excerpt": "Exploring the latest trends and innovations shaping the semiconductor industry "
                   "and VLSI design methodologies.",
        "content": "# The Future of VLSI Design and Semiconductor Technology\n\n"
                   "The semiconductor industry continues to evolve at an unprecedented pace. "
                   "Advanced process nodes, 3D integration and chiplet architectures, and AI "
                   "acceleration in silicon are shaping the next generation of VLSI design.\n\n"
                   "## The Role of EDA Tools\n\n"
                   "AI-driven design optimization, cloud-based design platforms and system-level "
                   "design flows help teams keep up with multi-billion transistor designs.",
        "author": "ASCOSEMI Technical Team",
        "publishDate": "2024-12-20",
        "readTime": "8 min read",
        "image": "",
        "tags": ["VLSI", "Semiconductor", "Technology", "Future Trends"],
        "featured": True,
        "published": True,
        "created_at": "2024-12-20T10:00:00.000Z",
        "updated_at": "2024-12-20T10:00:00.000Z",
    },
    {
        "id": "2",
        "title": "Advanced Circuit Design Techniques for Modern Applications",
        "excerpt": "Deep dive into modern circuit design methodologies and best practices for "
                   "optimal performance in today's applications.",
        "content": "# Advanced Circuit Design Techniques for Modern Applications\n\n"
                   "Power gating and DVFS keep static and dynamic power in check, while signal "
                   "integrity and clock domain crossing dominate high-speed design.\n\n"
                   "## Verification and Testing\n\n"
                   "Formal verification and DfT strategies such as scan chains and BIST close "
                   "the loop between design and silicon.",
        "author": "ASCOSEMI Design Team",
        "publishDate": "2024-12-18",
        "readTime": "10 min read",
        "image": "",
        "tags": ["Circuit Design", "Engineering", "Low Power", "High Speed"],
        "featured": False,
        "published": True,
        "created_at": "2024-12-18T10:00:00.000Z",
        "updated_at": "2024-12-18T10:00:00.000Z",
    },
]

REQUIRED = ("title", "content", "author")


def _newest_first(posts: List[BlogPost]) -> List[BlogPost]:
    return sorted(posts, key=lambda p: p.created_at, reverse=True)


class BlogStore:
    def __init__(self, seed: Optional[List[Mapping[str, Any]]] = None) -> None:
        self._lock = threading.Lock()
        self._posts: List[BlogPost] = [BlogPost(**copy.deepcopy(dict(p))) for p in (SEED_POSTS if seed is None else seed)]

    def list(
        self,
        published: Optional[bool] = None,
        featured: Optional[bool] = None,
        limit: Optional[int] = None,
        tag: Optional[str] = None,
    ) -> List[BlogPost]:
        posts = list(self._posts)
        if tag is not None:
            posts = [p for p in posts if any(t.lower() == tag.lower() for t in p.tags)]
        if published is not None:
            posts = [p for p in posts if p.published == published]
        if featured is not None:
            posts = [p for p in posts if p.featured == featured]
        posts = _newest_first(posts)
        return posts[:limit] if limit else posts

    def get(self, post_id: str) -> BlogPost:
        for p in self._posts:
            if p.id == post_id:
                return p
        raise ContentError("Blog post not found", status_code=404)

    @staticmethod
    def _validate(payload: Mapping[str, Any]) -> None:
        if not all(payload.get(k) for k in REQUIRED):
            raise ContentError("Missing required fields: title, content, author")

    def create(self, payload: Mapping[str, Any]) -> BlogPost:
        self._validate(payload)
        now = iso_now()
        post = BlogPost(
            id=str(epoch_ms()),
            title=payload["title"],
            excerpt=payload.get("excerpt") or "",
            content=payload["content"],
            author=payload["author"],
            publishDate=payload.get("publishDate") or today_stamp(),
            readTime=payload.get("readTime") or read_time(payload["content"]),
            image=payload.get("image") or "",
            tags=list(payload.get("tags") or []),
            featured=bool(payload.get("featured") or False),
            published=bool(payload.get("published") or False),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._posts.append(post)
        return post

    def update(self, post_id: str, payload: Mapping[str, Any]) -> BlogPost:
        current = self.get(post_id)
        self._validate(payload)
        updated = current.model_copy(update={
            "title": payload["title"],
            "excerpt": payload.get("excerpt") or "",
            "content": payload["content"],
            "author": payload["author"],
            "publishDate": payload.get("publishDate") or current.publishDate,
            "readTime": payload.get("readTime") or read_time(payload["content"]),
            "image": payload.get("image") or "",
            "tags": list(payload.get("tags") or []),
            "featured": current.featured if payload.get("featured") is None else bool(payload["featured"]),
            "published": current.published if payload.get("published") is None else bool(payload["published"]),
            "updated_at": iso_now(),
        })
        with self._lock:
            self._posts = [updated if p.id == post_id else p for p in self._posts]
        return updated

    def delete(self, post_id: str) -> BlogPost:
        post = self.get(post_id)
        with self._lock:
            self._posts = [p for p in self._posts if p.id != post_id]
        return post


__all__ = ["BlogPost", "BlogStore", "ContentError", "SEED_POSTS"]
