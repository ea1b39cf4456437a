from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # Wire keys are camelCase (fileName, uploadTime, ...); fields stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileDetails(_CamelModel):
    file_name: str = Field(description="Handle the file is stored under")
    original_name: str = Field(description="Filename declared by the uploader")
    size: int = Field(ge=0)
    extension: str
    upload_time: datetime


class UploadResponse(_CamelModel):
    file_details: FileDetails
    file_url: str
    download_url: str
    delete_url: str
    message: str = "File uploaded successfully"


class BlobInfoResponse(_CamelModel):
    file_name: str
    size: int = Field(ge=0)
    extension: str
    modified_time: datetime
