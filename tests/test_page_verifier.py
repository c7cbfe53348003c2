import io
import zipfile

from PIL import Image

from comicrepacker.core.page_verifier import PageVerifier
from comicrepacker.core.repacker import ArchiveRepacker


def png_bytes(color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_verify_pages_flags_undecodable_images(tmp_path):
    good = tmp_path / "01.png"
    good.write_bytes(png_bytes())
    bad = tmp_path / "02.jpg"
    bad.write_bytes(b"definitely not a jpeg")
    other = tmp_path / "ComicInfo.xml"
    other.write_text("<ComicInfo/>")

    checked, bad_pages = PageVerifier().verify_pages([good, bad, other])

    assert checked == 2
    assert bad_pages == [bad]


def test_repacker_keeps_bad_pages_when_verifying(tmp_path, fake_tool_factory):
    source = tmp_path / "book.cbr"
    source.write_bytes(b"rar")
    pages = {"01.png": png_bytes(), "02.jpg": b"truncated"}

    repacker = ArchiveRepacker(fake_tool_factory(extract_files=pages), temp_root=tmp_path, verify_pages=True)
    output = repacker.convert(source)

    with zipfile.ZipFile(output) as zf:
        assert sorted(zf.namelist()) == ["01.png", "02.jpg"]
        assert zf.read("02.jpg") == b"truncated"
