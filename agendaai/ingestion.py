# agendaai/ingestion.py

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from agendaai.errors import IngestionError

DEFAULT_MIME_TYPE = 'application/octet-stream'

# アップロード画面で受け付ける拡張子 (モデル側が最終的に判断するため参考値)
ACCEPTED_EXTENSIONS = ('.pdf', '.txt', '.md')
ACCEPTED_MIME_PREFIXES = ('image/', 'application/pdf', 'text/')

_SIZE_UNITS = ['B', 'KB', 'MB', 'GB']


def format_size(num_bytes: int) -> str:
    """バイト数を '1.5 KB' のような表示用文字列に変換する。"""
    if num_bytes <= 0:
        return '0 B'
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    # 末尾の .0 は付けない ("1 KB", "1.5 KB")
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {_SIZE_UNITS[i]}"


def is_accepted_type(name: str, mime_type: str) -> bool:
    """ファイルがアップロード対象として想定された形式かどうか。"""
    if name.lower().endswith(ACCEPTED_EXTENSIONS):
        return True
    return mime_type.startswith(ACCEPTED_MIME_PREFIXES)


@dataclass(frozen=True)
class UploadedFile:
    """ユーザーが選択した1つのファイル。選択ごとに作り直し、変更はしない。"""
    name: str
    type: str  # ブラウザ等が申告したメディアタイプ (空の場合あり)
    size: int
    data: str  # Base64
    mime_type: str

    def payload(self) -> bytes:
        return base64.b64decode(self.data)

    @property
    def size_label(self) -> str:
        return format_size(self.size)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "size_label": self.size_label,
            "mime_type": self.mime_type,
        }


def from_bytes(name: str, raw: bytes, declared_type: Optional[str] = None) -> UploadedFile:
    """生のバイト列から UploadedFile を作成する。"""
    if not raw:
        raise IngestionError(f"The file '{name}' is empty.")
    declared_type = declared_type or ''
    mime_type = declared_type or mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE
    return UploadedFile(
        name=name,
        type=declared_type,
        size=len(raw),
        data=base64.b64encode(raw).decode('ascii'),
        mime_type=mime_type,
    )


def from_base64(name: str, data: str, mime_type: Optional[str] = None, size: Optional[int] = None) -> UploadedFile:
    """
    クライアント側で既にBase64化されたペイロードから UploadedFile を作成する。
    'data:application/pdf;base64,....' のようなData URLもそのまま受け付ける。
    """
    if not data or not data.strip():
        raise IngestionError(f"The file '{name}' is empty.")
    if data.startswith('data:') and ',' in data:
        header, data = data.split(',', 1)
        if not mime_type:
            mime_type = header[len('data:'):].split(';')[0]
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise IngestionError(f"The file '{name}' is not valid base64 data.", details={"error": str(e)})
    if not raw:
        raise IngestionError(f"The file '{name}' is empty.")
    declared_type = mime_type or ''
    return UploadedFile(
        name=name,
        type=declared_type,
        size=size if size is not None else len(raw),
        data=data,
        mime_type=declared_type or mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE,
    )


def from_storage(storage) -> UploadedFile:
    """Flask (werkzeug) の FileStorage から UploadedFile を作成する。"""
    if storage is None or not storage.filename:
        raise IngestionError("No file was selected.")
    try:
        raw = storage.read()
    except OSError as e:
        raise IngestionError(f"Could not read '{storage.filename}'.", details={"error": str(e)})
    return from_bytes(storage.filename, raw, storage.mimetype)


def from_path(path) -> UploadedFile:
    """ローカルファイルから UploadedFile を作成する (tasks.py から利用)。"""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise IngestionError(f"Could not read '{path}'.", details={"error": str(e)})
    return from_bytes(path.name, raw, mimetypes.guess_type(path.name)[0])
