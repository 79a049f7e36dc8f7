from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from uuid import UUID, uuid4

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def is_valid_slug(slug: str) -> bool:
    return bool(_SLUG_RE.match(slug))


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    slug: str
    title: str
    summary: str | None = None
    thumbnail: str | None = None
    is_published: bool = False
    created_at: int = field(default_factory=lambda: int(time.time()))

    @staticmethod
    def new(
        *,
        slug: str,
        title: str,
        summary: str | None = None,
        thumbnail: str | None = None,
        is_published: bool = False,
    ) -> Course:
        return Course(
            id=uuid4(),
            slug=slug,
            title=title,
            summary=summary,
            thumbnail=thumbnail,
            is_published=is_published,
        )


@dataclass(frozen=True, slots=True)
class CourseSession:
    """One lesson ("week") of a course, ordered by ``index`` (1-based)."""

    id: UUID
    course_id: UUID
    index: int
    title: str
    summary: str | None = None
    video_url: str | None = None
    captions_vtt_url: str | None = None
    transcript: str | None = None
    guide_online_url: str | None = None
    guide_pdf_url: str | None = None
    thumbnail: str | None = None

    @staticmethod
    def new(
        *,
        course_id: UUID,
        index: int,
        title: str,
        summary: str | None = None,
        video_url: str | None = None,
        captions_vtt_url: str | None = None,
        transcript: str | None = None,
        guide_online_url: str | None = None,
        guide_pdf_url: str | None = None,
        thumbnail: str | None = None,
    ) -> CourseSession:
        return CourseSession(
            id=uuid4(),
            course_id=course_id,
            index=index,
            title=title,
            summary=summary,
            video_url=video_url,
            captions_vtt_url=captions_vtt_url,
            transcript=transcript,
            guide_online_url=guide_online_url,
            guide_pdf_url=guide_pdf_url,
            thumbnail=thumbnail,
        )
