# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


# Auth
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ForgetPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = Field(pattern=r"^[0-9]{6}$")
    new_password: str = Field(min_length=6)


class UserResponse(BaseModel):
    id: int
    email: str
    is_verified: bool
    role: str
    profile_picture: str | None = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class ProfilePictureResponse(BaseModel):
    file_path: str


# Notes
class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str

    @model_validator(mode="after")
    def _strip_title(self) -> "NoteCreate":
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Title cannot be empty")
        return self


class NoteUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = None

    @model_validator(mode="after")
    def _require_one_field(self) -> "NoteUpdate":
        if self.title is None and self.content is None:
            raise ValueError("Provide title or content")
        if self.title is not None:
            self.title = self.title.strip()
            if not self.title:
                raise ValueError("Title cannot be empty")
        return self


class NoteOwner(BaseModel):
    id: int
    email: str
    is_verified: bool

    model_config = ConfigDict(from_attributes=True)


class NoteResponse(BaseModel):
    id: int
    title: str
    content: str
    owner: NoteOwner
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotePageResponse(BaseModel):
    notes: list[NoteResponse]
    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    model_config = ConfigDict(from_attributes=True)
