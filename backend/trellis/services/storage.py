"""Path-keyed object storage for uploaded engagement files."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import quote, urlencode

from trellis.core.config import AppSettings, get_settings
from trellis.core.logging import get_logger
from trellis.services.errors import InvalidSignatureError, StorageConflictError, StorageError

logger = get_logger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[3]


@dataclass(frozen=True, slots=True)
class SignedUrl:
    url: str
    expires_at: datetime


def _resolve_root(raw_path: str | Path) -> Path:
    """Convert configured paths to absolute locations under the project root."""

    path = Path(raw_path)
    if path.is_absolute():
        return path
    return (_REPO_ROOT / path).resolve()


class LocalObjectStore:
    """Buckets are directories below ``root``; object paths are relative file paths."""

    def __init__(self, root: str | Path, *, secret: str, base_url: str) -> None:
        self.root = _resolve_root(root)
        self._secret = secret.encode("utf-8")
        self.base_url = base_url.rstrip("/")

    def resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self.root / bucket).resolve()
        target = (bucket_dir / path).resolve()
        if bucket_dir not in target.parents:
            raise StorageError(f"Path {path!r} escapes bucket {bucket!r}")
        return target

    async def upload(self, bucket: str, path: str, data: bytes, *, content_type: str | None = None) -> None:
        target = self.resolve(bucket, path)
        try:
            await asyncio.to_thread(_write_new_file, target, data)
        except FileExistsError as exc:
            raise StorageConflictError(f"Object already exists at {bucket}/{path}") from exc
        except OSError as exc:
            raise StorageError(f"Could not store {bucket}/{path}") from exc

        logger.info("storage.uploaded", bucket=bucket, path=path, size=len(data), content_type=content_type)

    async def remove(self, bucket: str, paths: Iterable[str]) -> None:
        targets = [self.resolve(bucket, path) for path in paths]
        try:
            await asyncio.to_thread(_unlink_all, targets)
        except OSError as exc:
            raise StorageError(f"Could not remove objects from {bucket}") from exc

        logger.info("storage.removed", bucket=bucket, count=len(targets))

    def create_signed_url(
        self,
        bucket: str,
        path: str,
        expires_in: int,
        *,
        download: str | None = None,
        now: datetime | None = None,
    ) -> SignedUrl:
        self.resolve(bucket, path)
        now = now or datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=expires_in)
        expires = int(expires_at.timestamp())

        params = {"expires": str(expires)}
        if download:
            params["download"] = download
        params["signature"] = self._sign(bucket, path, expires, download)

        url = f"{self.base_url}/v1/files/{quote(bucket)}/{quote(path)}?{urlencode(params)}"
        return SignedUrl(url=url, expires_at=expires_at)

    def verify_signed_request(
        self,
        bucket: str,
        path: str,
        *,
        expires: int,
        signature: str,
        download: str | None = None,
        now: datetime | None = None,
    ) -> Path:
        """Return the object's location when the signature is valid and unexpired."""

        expected = self._sign(bucket, path, expires, download)
        if not hmac.compare_digest(expected, signature):
            raise InvalidSignatureError("Signature does not match.")

        now = now or datetime.now(timezone.utc)
        if expires < int(now.timestamp()):
            raise InvalidSignatureError("Link has expired.")

        return self.resolve(bucket, path)

    def _sign(self, bucket: str, path: str, expires: int, download: str | None) -> str:
        payload = f"{bucket}|{path}|{expires}|{download or ''}"
        return hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).hexdigest()


def _write_new_file(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("xb") as file_obj:
        file_obj.write(data)


def _unlink_all(targets: list[Path]) -> None:
    for target in targets:
        target.unlink(missing_ok=True)


def build_object_store(settings: AppSettings | None = None) -> LocalObjectStore:
    settings = settings or get_settings()
    return LocalObjectStore(
        settings.storage_root,
        secret=settings.signing_secret,
        base_url=settings.public_base_url,
    )
