from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    url: str
    bucket: str


class DeleteFileRequest(BaseModel):
    url: str = Field(min_length=1)
