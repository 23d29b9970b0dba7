# projectdocs/api/templating.py
import re
from pathlib import Path
from typing import List

from fastapi.templating import Jinja2Templates

TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_PATH))

BLANK_LINES = re.compile(r"\n\s*\n")


def _normalize_newlines(text: str) -> str:
    # Browsers submit textarea content with CRLF line endings
    return text.replace("\r\n", "\n").replace("\r", "\n")


def first_line(text: str | None) -> str:
    """First line of a description, with "..." when more text follows"""
    if not text:
        return ""
    lines = _normalize_newlines(text).strip().splitlines()
    if not lines:
        return ""
    if len(lines) > 1:
        return f"{lines[0]}..."
    return lines[0]


def paragraphs(text: str | None) -> List[str]:
    """Split text into paragraphs on blank lines"""
    if not text:
        return []
    chunks = BLANK_LINES.split(_normalize_newlines(text).strip())
    return [chunk.strip() for chunk in chunks if chunk.strip()]


def filesize(value: int | None) -> str:
    size = value or 0
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


templates.env.filters["first_line"] = first_line
templates.env.filters["paragraphs"] = paragraphs
templates.env.filters["filesize"] = filesize
