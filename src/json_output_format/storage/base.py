from __future__ import annotations
import fnmatch
import glob
import io
import os
import shutil
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, List, Optional

from ..errors import ConfigurationError


class StorageBackend(ABC):
    """Storage abstraction for filesystems and cloud buckets."""

    @abstractmethod
    def join(self, *parts: str) -> str:
        raise NotImplementedError()

    @abstractmethod
    def exists(self, path: str) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def makedirs(self, path: str, exist_ok: bool = True) -> None:
        raise NotImplementedError()

    @abstractmethod
    def list_files(self, path: str, pattern: Optional[str] = None) -> List[str]:
        raise NotImplementedError()

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        raise NotImplementedError()

    @abstractmethod
    def write_file(self, path: str, data: bytes) -> None:
        raise NotImplementedError()

    @abstractmethod
    def create(self, path: str, overwrite: bool = False) -> BinaryIO:
        """Open a binary stream for writing a new file.

        Raises FileExistsError when the path exists and overwrite is False.
        """
        raise NotImplementedError()

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        raise NotImplementedError()

    @abstractmethod
    def delete(self, path: str, recursive: bool = False) -> None:
        raise NotImplementedError()


class LocalStorageBackend(StorageBackend):
    """Filesystem-backed storage backend."""

    def join(self, *parts: str) -> str:
        return os.path.join(*parts) if parts else ""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def makedirs(self, path: str, exist_ok: bool = True) -> None:
        if not path:
            return
        os.makedirs(path, exist_ok=exist_ok)

    def list_files(self, path: str, pattern: Optional[str] = None) -> List[str]:
        if not path:
            return []
        if not os.path.exists(path):
            return []
        if pattern:
            return sorted(glob.glob(os.path.join(path, pattern)))
        return sorted(
            os.path.join(path, entry)
            for entry in os.listdir(path)
            if os.path.isfile(os.path.join(path, entry))
        )

    def read_file(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_file(self, path: str, data: bytes) -> None:
        dirpath = os.path.dirname(path)
        if dirpath:
            os.makedirs(dirpath, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def create(self, path: str, overwrite: bool = False) -> BinaryIO:
        dirpath = os.path.dirname(path)
        if dirpath:
            os.makedirs(dirpath, exist_ok=True)
        # "x" fails atomically if the file is already there
        return open(path, "wb" if overwrite else "xb")

    def rename(self, src: str, dst: str) -> None:
        dirpath = os.path.dirname(dst)
        if dirpath:
            os.makedirs(dirpath, exist_ok=True)
        os.replace(src, dst)

    def delete(self, path: str, recursive: bool = False) -> None:
        if not os.path.exists(path):
            return
        if os.path.isdir(path):
            if recursive:
                shutil.rmtree(path)
            else:
                os.rmdir(path)
        else:
            os.remove(path)


class _S3UploadStream(io.BytesIO):
    """In-memory buffer that becomes an S3 object when closed."""

    def __init__(self, backend: "S3StorageBackend", key: str):
        super().__init__()
        self._backend = backend
        self._key = key

    def close(self) -> None:
        if self.closed:
            return
        from botocore.exceptions import BotoCoreError, ClientError
        try:
            self._backend.s3_client.put_object(Bucket=self._backend.bucket, Key=self._key, Body=self.getvalue())
        except (BotoCoreError, ClientError) as exc:
            raise OSError(f"upload of s3://{self._backend.bucket}/{self._key} failed: {exc}") from exc
        finally:
            super().close()


class S3StorageBackend(StorageBackend):
    """Minimal S3 backend for staged and committed output files."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        aws_session_token: Optional[str] = None,
        s3_client: Any = None,
    ):
        self.bucket = bucket
        self.prefix = prefix.rstrip("/").lstrip("/")

        if s3_client is not None:
            self.s3_client = s3_client
            return

        try:
            import boto3
        except ImportError as exc:
            raise ImportError("boto3 required for S3 storage backend") from exc

        client_kwargs: Dict[str, Any] = {}
        if region:
            client_kwargs["region_name"] = region
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        if aws_access_key_id:
            client_kwargs["aws_access_key_id"] = aws_access_key_id
        if aws_secret_access_key:
            client_kwargs["aws_secret_access_key"] = aws_secret_access_key
        if aws_session_token:
            client_kwargs["aws_session_token"] = aws_session_token

        self.s3_client = boto3.client("s3", **client_kwargs)

    def _normalize_path(self, path: str) -> str:
        key = path.replace("\\", "/").lstrip("/")
        if self.prefix and not (key == self.prefix or key.startswith(self.prefix + "/")):
            key = f"{self.prefix}/{key}"
        return key.strip("/")

    def join(self, *parts: str) -> str:
        clean_parts = [p.strip("/") for p in parts if p]
        return "/".join(clean_parts)

    def exists(self, path: str) -> bool:
        if not path:
            return False
        from botocore.exceptions import ClientError
        key = self._normalize_path(path)
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey"):
                return False
            raise

    def makedirs(self, path: str, exist_ok: bool = True) -> None:
        # S3 is flat; directories are logical. No action required.
        return

    def _list_keys(self, path: str) -> List[str]:
        key_prefix = self._normalize_path(path)
        if path and not key_prefix.endswith("/"):
            key_prefix += "/"
        paginator = self.s3_client.get_paginator("list_objects_v2")
        keys: List[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=key_prefix):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"])
        return keys

    def list_files(self, path: str, pattern: Optional[str] = None) -> List[str]:
        results = []
        for key in self._list_keys(path):
            if pattern and not fnmatch.fnmatch(os.path.basename(key), pattern):
                continue
            results.append(key)
        return sorted(results)

    def read_file(self, path: str) -> bytes:
        key = self._normalize_path(path)
        response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
        return response["Body"].read()

    def write_file(self, path: str, data: bytes) -> None:
        key = self._normalize_path(path)
        self.s3_client.put_object(Bucket=self.bucket, Key=key, Body=data)

    def create(self, path: str, overwrite: bool = False) -> BinaryIO:
        if not overwrite and self.exists(path):
            raise FileExistsError(f"s3://{self.bucket}/{self._normalize_path(path)} already exists")
        return _S3UploadStream(self, self._normalize_path(path))

    def rename(self, src: str, dst: str) -> None:
        # no server-side rename in S3: copy then delete
        src_key = self._normalize_path(src)
        dst_key = self._normalize_path(dst)
        self.s3_client.copy_object(
            Bucket=self.bucket,
            Key=dst_key,
            CopySource={"Bucket": self.bucket, "Key": src_key},
        )
        self.s3_client.delete_object(Bucket=self.bucket, Key=src_key)

    def delete(self, path: str, recursive: bool = False) -> None:
        if recursive:
            for key in self._list_keys(path):
                self.s3_client.delete_object(Bucket=self.bucket, Key=key)
        key = self._normalize_path(path)
        if key:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)


def get_storage_backend(storage_config: Optional[Dict[str, Any]]) -> StorageBackend:
    """Create a storage backend from configuration."""
    if not storage_config:
        return LocalStorageBackend()
    storage_type = storage_config.get("type", "local").lower()
    if storage_type == "local":
        return LocalStorageBackend()
    if storage_type == "s3":
        bucket = storage_config.get("bucket")
        if not bucket:
            raise ConfigurationError("S3 storage requires a 'bucket' value")
        return S3StorageBackend(
            bucket=bucket,
            prefix=storage_config.get("prefix", ""),
            region=storage_config.get("region"),
            endpoint_url=storage_config.get("endpoint_url"),
            aws_access_key_id=storage_config.get("aws_access_key_id"),
            aws_secret_access_key=storage_config.get("aws_secret_access_key"),
            aws_session_token=storage_config.get("aws_session_token"),
        )
    raise ConfigurationError(f"Unknown storage type: {storage_type}")
