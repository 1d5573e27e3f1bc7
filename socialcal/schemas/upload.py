from pydantic import BaseModel
from typing import List


class UploadedFile(BaseModel):
    name: str
    url: str
    path: str
    type: str
    size: int


class UploadResponse(BaseModel):
    success: bool = True
    files: List[UploadedFile]


class CleanupRequest(BaseModel):
    urls: List[str]


class CleanupResponse(BaseModel):
    success: bool = True
    removed: int
