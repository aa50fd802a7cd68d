from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

PositiveInt = Annotated[int, Field(ge=1)]
PositiveFloat = Annotated[float, Field(gt=0)]


class HttpConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = DEFAULT_USER_AGENT
    short_link_timeout_seconds: PositiveFloat = 15.0
    page_timeout_seconds: PositiveFloat = 45.0
    download_timeout_seconds: PositiveFloat = 90.0

    @field_validator("user_agent")
    @classmethod
    def _user_agent_must_be_set(cls, v: str) -> str:
        ua = (v or "").strip()
        if not ua:
            raise ValueError("must be a non-empty string")
        return ua


class DownloadConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    file_prefix: str = "xhs"
    max_workers: PositiveInt = 4
    max_attempts: PositiveInt = 3

    @field_validator("file_prefix")
    @classmethod
    def _prefix_must_be_filename_safe(cls, v: str) -> str:
        prefix = (v or "").strip()
        if not prefix:
            raise ValueError("must be a non-empty string")
        if "/" in prefix or "\\" in prefix:
            raise ValueError("must not contain path separators")
        return prefix


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    http: HttpConfig = Field(default_factory=HttpConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
