"""
Tests for the media store.
"""

import pytest

from wabridge.media import MediaStore
from wabridge.models import MessageKind


class TestMediaStore:
    """Test file layout and failure propagation."""

    @pytest.mark.parametrize("kind,extension", [
        (MessageKind.IMAGE, ".jpg"),
        (MessageKind.VIDEO, ".mp4"),
        (MessageKind.AUDIO, ".ogg"),
        (MessageKind.DOCUMENT, ".pdf"),
    ])
    def test_layout(self, tmp_path, kind, extension):
        path = MediaStore(tmp_path / "media").save(kind, b"payload")

        assert path.parent == tmp_path / "media" / kind.value
        assert path.suffix == extension
        assert path.stem.isdigit()
        assert path.read_bytes() == b"payload"

    def test_other_kind_has_no_extension(self, tmp_path):
        path = MediaStore(tmp_path).save(MessageKind.UNKNOWN, b"x")
        assert path.suffix == ""
        assert path.parent.name == "unknown"

    def test_directory_reused(self, tmp_path):
        store = MediaStore(tmp_path)
        first = store.save(MessageKind.IMAGE, b"1")
        second = store.save(MessageKind.IMAGE, b"2")

        assert first != second
        assert first.parent == second.parent
        assert sorted(p.read_bytes() for p in first.parent.iterdir()) == [b"1", b"2"]

    def test_unwritable_root_raises(self, tmp_path):
        root = tmp_path / "media"
        root.write_text("a file, not a directory")

        with pytest.raises(OSError):
            MediaStore(root).save(MessageKind.IMAGE, b"x")
