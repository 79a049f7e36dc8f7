"""Demo content: the eight-week "basics" course.

Idempotent.  Re-running publishes the course and adds any missing week;
existing sessions (and the completions pointing at them) are left alone.
"""

from __future__ import annotations

import logging

from coursehub.models.course import Course, CourseSession
from coursehub.repos.stores import Stores

logger = logging.getLogger(__name__)

BASICS_SLUG = "basics"
BASICS_WEEKS = 8


async def seed_basics(stores: Stores) -> Course:
    course = await stores.content.get_course_by_slug(BASICS_SLUG)
    if course is None:
        course = Course.new(
            slug=BASICS_SLUG,
            title="Basics",
            summary="An 8-week foundational course.",
            is_published=True,
        )
        await stores.content.add_course(course)
    elif not course.is_published:
        course = await stores.content.set_published(course.id, True) or course

    added = 0
    for week in range(1, BASICS_WEEKS + 1):
        if await stores.content.get_session_by_index(course.id, week) is not None:
            continue
        await stores.content.add_session(
            CourseSession.new(
                course_id=course.id,
                index=week,
                title=f"Week {week}: Lesson",
                summary=f"Overview for week {week}",
                video_url=f"/videos/week{week}.mp4",
                captions_vtt_url=f"/captions/week{week}.vtt",
                transcript=f"Transcript placeholder for week {week}",
                guide_online_url=f"/guides/week{week}.html",
                guide_pdf_url=f"/guides/week{week}.pdf",
                thumbnail=f"/thumbs/week{week}.jpg",
            )
        )
        added += 1

    logger.info("Seeded course=%s sessions_added=%d", BASICS_SLUG, added)
    return course
