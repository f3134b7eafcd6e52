"""Upload-time hooks: accept SVG files, but only after sanitization."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from filetype import guess

from .errors import UploadRejected
from .models import AllowList, UploadedFile
from .sanitizer import DEFAULT_ALLOW_LIST, sanitize_svg
from .utils import SVG_SUFFIX

logger = logging.getLogger("inline_svg")

SVG_MIME_TYPE = "image/svg+xml"
REJECTION_MESSAGE = "The uploaded SVG file is invalid or could not be sanitized."


def register_svg_mime(mimes: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of an extension -> MIME mapping that also permits SVG."""
    updated = dict(mimes)
    updated["svg"] = SVG_MIME_TYPE
    return updated


def fix_svg_filetype(info: Mapping[str, Any], filename: Optional[str]) -> Dict[str, Any]:
    """Report ``.svg`` files as SVG even when content sniffing could not tell.

    ``info`` is the ``ext``/``type`` mapping produced by the upload layer.
    """
    if not filename or not filename.lower().endswith(SVG_SUFFIX):
        return dict(info)
    updated = dict(info)
    updated["ext"] = "svg"
    updated["type"] = SVG_MIME_TYPE
    return updated


def sanitize_upload(
    upload: UploadedFile,
    allow_list: AllowList = DEFAULT_ALLOW_LIST,
) -> UploadedFile:
    """Return ``upload`` with its SVG content replaced by the sanitized markup.

    Non-SVG uploads and uploads that already failed pass through untouched.
    Raises ``UploadRejected`` when nothing safe is left to store.
    """
    if upload.error or upload.mime_type != SVG_MIME_TYPE:
        return upload

    kind = guess(upload.content)
    if kind is not None:
        logger.warning(
            "Rejecting %s: declared %s but content looks like %s",
            upload.filename,
            SVG_MIME_TYPE,
            kind.mime,
        )
        raise UploadRejected(upload.filename, REJECTION_MESSAGE)

    sanitized = sanitize_svg(upload.content, allow_list)
    if not sanitized:
        logger.warning("Rejecting %s: no SVG left after sanitization", upload.filename)
        raise UploadRejected(upload.filename, REJECTION_MESSAGE)
    return replace(upload, content=sanitized.encode("utf-8"))


def sanitize_upload_file(
    path: Path,
    mime_type: Optional[str] = SVG_MIME_TYPE,
    allow_list: AllowList = DEFAULT_ALLOW_LIST,
) -> UploadedFile:
    """Sanitize an uploaded file in place on disk."""
    path = Path(path)
    upload = UploadedFile(filename=path.name, content=path.read_bytes(), mime_type=mime_type)
    sanitized = sanitize_upload(upload, allow_list)
    if sanitized is not upload:
        path.write_bytes(sanitized.content)
    return sanitized
