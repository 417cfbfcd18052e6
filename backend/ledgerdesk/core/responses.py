"""File download responses."""

import re
from urllib.parse import quote

from fastapi.responses import Response

_UNSAFE_FILENAME_CHARS = re.compile(r'[^\x20-\x7e]|["\\]')


def content_disposition(filename: str) -> str:
    """``attachment`` header value that survives any filename.

    Header values must be latin-1, so non-ASCII names (and quotes) get an
    ASCII stand-in in ``filename`` plus the exact name in ``filename*``.
    """
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def attachment(content: bytes | str, filename: str, media_type: str, headers: dict | None = None) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(filename), **(headers or {})},
    )
