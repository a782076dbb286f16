from typing import List

from .common import CamelModel


class UploadedFile(CamelModel):
    url: str
    type: str


class UploadOut(CamelModel):
    files: List[UploadedFile]
