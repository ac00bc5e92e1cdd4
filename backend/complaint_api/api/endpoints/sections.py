"""
Section markup fragments.

The dashboard shell fetches ``/<section>.html`` for each view and
``/sidebar.html`` once at startup.
"""

import re
from pathlib import Path

import aiofiles
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from complaint_api.core.config import settings
from complaint_api.core.exceptions import SectionNotFoundError
from complaint_api.core.logging_config import logger


router = APIRouter()

SECTION_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


def resolve_fragment_path(section: str) -> Path:
    """Map a section name to its fragment file, rejecting anything that is not a plain name"""
    if not SECTION_NAME_PATTERN.match(section):
        raise SectionNotFoundError(section)

    path = Path(settings.SECTIONS_DIR) / f"{section}.html"
    if not path.is_file():
        raise SectionNotFoundError(section)
    return path


@router.get("/{section}.html", response_class=HTMLResponse, tags=["Sections"])
async def get_section_fragment(section: str):
    """Serve a section's HTML fragment"""
    path = resolve_fragment_path(section)

    async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
        markup = await f.read()

    logger.debug(f"Served fragment {section} ({len(markup)} chars)")
    return HTMLResponse(content=markup, headers={"Cache-Control": "no-cache"})
