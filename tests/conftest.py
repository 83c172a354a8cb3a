from __future__ import annotations
import io
from typing import Any, Dict, List

import pytest
from botocore.exceptions import ClientError

from json_output_format.writers.json_writer import JsonConverters


class StubS3Client:
    """Just enough of the boto3 S3 client for the storage backend."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {"ContentLength": len(self.objects[Key])}

    def put_object(self, Bucket: str, Key: str, Body: bytes) -> None:
        self.objects[Key] = bytes(Body)

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        return {"Body": io.BytesIO(self.objects[Key])}

    def copy_object(self, Bucket: str, Key: str, CopySource: Dict[str, str]) -> None:
        self.objects[Key] = self.objects[CopySource["Key"]]

    def delete_object(self, Bucket: str, Key: str) -> None:
        self.objects.pop(Key, None)

    def get_paginator(self, name: str) -> "StubS3Client":
        assert name == "list_objects_v2"
        return self

    def paginate(self, Bucket: str, Prefix: str) -> List[Dict[str, Any]]:
        keys = sorted(k for k in self.objects if k.startswith(Prefix))
        return [{"Contents": [{"Key": k} for k in keys]}]


@pytest.fixture
def s3_client() -> StubS3Client:
    return StubS3Client()


@pytest.fixture
def identity() -> JsonConverters:
    return JsonConverters(convert_key=str, convert_value=lambda v: v)
