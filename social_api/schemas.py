from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreateUserRequest(BaseModel):
    email: str = ""
    password: str = ""
    name: str = ""
    age: int = 0


class UpdateUserRequest(BaseModel):
    password: str = ""
    name: str = ""
    age: int = 0


class CreatePostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_email: str = Field(default="", alias="userEmail")
    text: str = ""
