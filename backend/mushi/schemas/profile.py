from pydantic import BaseModel


class AvatarUploadResponse(BaseModel):
    msg: str
    avatar_url: str
    avatar_file: str
