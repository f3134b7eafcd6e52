from __future__ import annotations

import pytest

from inline_svg.errors import UploadRejected
from inline_svg.models import UploadedFile
from inline_svg.uploads import (
    REJECTION_MESSAGE,
    SVG_MIME_TYPE,
    fix_svg_filetype,
    register_svg_mime,
    sanitize_upload,
    sanitize_upload_file,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_svg_upload_is_replaced_by_sanitized_markup():
    upload = UploadedFile(
        filename="logo.svg",
        content=b'<svg onload="x()"><script>1</script><rect width="1"/></svg>',
        mime_type=SVG_MIME_TYPE,
    )
    result = sanitize_upload(upload)
    assert result.content == b'<svg><rect width="1"/></svg>'
    assert result.filename == "logo.svg"
    assert upload.content.startswith(b"<svg onload")


def test_non_svg_upload_passes_through():
    upload = UploadedFile(filename="a.png", content=PNG_BYTES, mime_type="image/png")
    assert sanitize_upload(upload) is upload


def test_upload_with_error_passes_through():
    upload = UploadedFile(
        filename="a.svg", content=b"", mime_type=SVG_MIME_TYPE, error="too big"
    )
    assert sanitize_upload(upload) is upload


@pytest.mark.parametrize("content", [b"", b"<html><body>x</body></html>", b"not xml"])
def test_unsanitizable_svg_is_rejected(content):
    upload = UploadedFile(filename="bad.svg", content=content, mime_type=SVG_MIME_TYPE)
    with pytest.raises(UploadRejected) as excinfo:
        sanitize_upload(upload)
    assert excinfo.value.message == REJECTION_MESSAGE
    assert excinfo.value.filename == "bad.svg"


def test_binary_image_disguised_as_svg_is_rejected():
    upload = UploadedFile(filename="x.svg", content=PNG_BYTES, mime_type=SVG_MIME_TYPE)
    with pytest.raises(UploadRejected):
        sanitize_upload(upload)


def test_sanitize_upload_file_rewrites_in_place(tmp_path):
    path = tmp_path / "icon.svg"
    path.write_bytes(b'<svg><circle r="2" onclick="x()"/></svg>')
    sanitize_upload_file(path)
    assert path.read_bytes() == b'<svg><circle r="2"/></svg>'


def test_sanitize_upload_file_leaves_rejected_file_untouched(tmp_path):
    path = tmp_path / "icon.svg"
    path.write_bytes(b"<html/>")
    with pytest.raises(UploadRejected):
        sanitize_upload_file(path)
    assert path.read_bytes() == b"<html/>"


def test_register_svg_mime_returns_new_mapping():
    mimes = {"png": "image/png"}
    updated = register_svg_mime(mimes)
    assert updated == {"png": "image/png", "svg": SVG_MIME_TYPE}
    assert mimes == {"png": "image/png"}


def test_fix_svg_filetype():
    assert fix_svg_filetype({"ext": False, "type": False}, "Logo.SVG") == {
        "ext": "svg",
        "type": SVG_MIME_TYPE,
    }
    info = {"ext": "png", "type": "image/png"}
    assert fix_svg_filetype(info, "photo.png") == info
    assert fix_svg_filetype(info, "") == info


def test_illustrator_export_with_doctype_is_accepted():
    content = (
        b'<?xml version="1.0" encoding="utf-8"?>\n'
        b'<!DOCTYPE svg [<!ENTITY ns_x "http://ns.adobe.com/Extensibility/1.0/">]>\n'
        b'<svg xmlns="http://www.w3.org/2000/svg" xmlns:x="&ns_x;">'
        b'<rect width="1"/></svg>'
    )
    upload = UploadedFile(filename="logo.svg", content=content, mime_type=SVG_MIME_TYPE)
    result = sanitize_upload(upload)
    assert result.content == (
        b'<svg xmlns="http://www.w3.org/2000/svg"><rect width="1"/></svg>'
    )
