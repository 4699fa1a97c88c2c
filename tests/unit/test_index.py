import base64
import io
import json
from unittest.mock import patch

import pytest

from heirbox.core.exceptions import IncompleteContentError, StreamEncryptionError
from heirbox.core.index import serialize_index, write_index
from heirbox.core.models import ContentFile, DisplayMode
from heirbox.core.storage import DistStorage


def _encrypted(path, **kwargs):
    return ContentFile(
        path=path,
        size=kwargs.pop("size", 1),
        display=kwargs.pop("display", DisplayMode.TEXT),
        dist=kwargs.pop("dist", "ab" * 12),
        tag=kwargs.pop("tag", "dGFn"),
        **kwargs,
    )


def test_serialize_index_records():
    content = [
        _encrypted("a.txt", size=5),
        _encrypted("img/p.png", display=DisplayMode.IMAGE, processed="resize", dist="cd" * 12),
    ]
    records = json.loads(serialize_index(content))

    assert records == [
        {"path": "a.txt", "size": 5, "display": "text", "dist": "ab" * 12, "tag": "dGFn"},
        {
            "path": "img/p.png",
            "size": 1,
            "display": "image",
            "processed": "resize",
            "dist": "cd" * 12,
            "tag": "dGFn",
        },
    ]


def test_serialize_empty_index():
    assert json.loads(serialize_index([])) == []


def test_serialize_non_ascii_paths():
    records = json.loads(serialize_index([_encrypted("lettere/àèì.txt")]).decode("utf-8"))
    assert records[0]["path"] == "lettere/àèì.txt"


@pytest.mark.parametrize("missing", ["dist", "tag"])
def test_serialize_rejects_unencrypted(missing):
    entry = _encrypted("a.txt")
    setattr(entry, missing, None)
    with pytest.raises(IncompleteContentError, match="a.txt"):
        serialize_index([_encrypted("ok.txt"), entry])


def test_write_index(tmp_path, master_key, decrypt_blob):
    storage = DistStorage(tmp_path / "dist")
    storage.clean()
    content = [_encrypted("a.txt"), _encrypted("b.txt", dist="ef" * 12)]

    tag = write_index(master_key, content, storage)

    assert len(base64.b64decode(tag)) == 16
    plaintext = decrypt_blob(master_key, storage.index_path.read_bytes(), tag)
    assert [ContentFile.from_dict(r) for r in json.loads(plaintext)] == content


def test_write_index_incomplete_writes_nothing(tmp_path, master_key):
    storage = DistStorage(tmp_path / "dist")
    storage.clean()
    with pytest.raises(IncompleteContentError):
        write_index(master_key, [ContentFile(path="a.txt", size=1)], storage)
    assert not storage.index_path.exists()


class CloseFailingWriter(io.BytesIO):
    def close(self):
        if not self.closed:
            super().close()
            raise OSError("disk quota exceeded")


def test_write_index_close_failure(tmp_path, master_key):
    storage = DistStorage(tmp_path / "dist")
    storage.clean()
    with patch.object(storage, "open_index", return_value=CloseFailingWriter()):
        with pytest.raises(StreamEncryptionError, match="disk quota"):
            write_index(master_key, [_encrypted("a.txt")], storage)
