"""Tests for attachment storage."""

from datetime import datetime

from mail_topic_tracker.attachments import save_attachments, topic_folder
from mail_topic_tracker.models import Attachment

RECEIVED = datetime(2024, 5, 2, 16, 5)


def test_saves_under_topic_and_date(tmp_path):
    paths = save_attachments(
        tmp_path,
        "PRJ-42",
        RECEIVED,
        [Attachment("agenda.pdf", b"one"), Attachment("notes.txt", b"two")],
    )

    folder = tmp_path / "PRJ-42" / "2024-05-02"
    assert paths == [str(folder / "agenda.pdf"), str(folder / "notes.txt")]
    assert (folder / "notes.txt").read_bytes() == b"two"


def test_names_are_sanitized(tmp_path):
    (path,) = save_attachments(tmp_path, "A/B: C", RECEIVED, [Attachment("../evil?.pdf", b"x")])
    assert path == str(tmp_path / "A_B_ C" / "2024-05-02" / ".._evil_.pdf")


def test_missing_name_gets_fallback(tmp_path):
    (path,) = save_attachments(tmp_path, "T", RECEIVED, [Attachment("", b"x")])
    assert path.startswith(str(tmp_path / "T" / "2024-05-02"))
    assert (tmp_path / "T" / "2024-05-02").is_dir()


def test_overwrite_is_idempotent(tmp_path):
    save_attachments(tmp_path, "T", RECEIVED, [Attachment("a.bin", b"old")])
    (path,) = save_attachments(tmp_path, "T", RECEIVED, [Attachment("a.bin", b"new")])
    assert open(path, "rb").read() == b"new"
    assert len(list((tmp_path / "T" / "2024-05-02").iterdir())) == 1


def test_no_attachments_creates_nothing(tmp_path):
    assert save_attachments(tmp_path, "T", RECEIVED, []) == []
    assert not topic_folder(tmp_path, "T").exists()
