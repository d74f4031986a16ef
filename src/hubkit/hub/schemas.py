# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Pydantic models for hub request/response bodies."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SystemInfo(BaseModel):
    """Hub system information (GET /v1/systeminfo)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hostname: str = Field(default="", description="Hub host name")
    firmware_version: str = Field(default="", alias="firmwareVersion")
    region: str = Field(default="", description="Firmware region, e.g. 'US'")
    name: Optional[str] = Field(default=None, alias="user", description="User-assigned hub name")
    ip: Optional[str] = Field(default=None, description="Hub IP address")
    airkey: Optional[str] = Field(default=None, description="Hub pairing key")


class ServerRegistration(BaseModel):
    """Body for registering a publishing surface on the hub."""

    name: str = Field(..., min_length=1, description="Integration server name")
    base_url: str = Field(..., alias="baseUrl", description="Publishing surface URL")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("baseUrl must be an http(s) URL")
        return v.rstrip("/")


class ServerUnregistration(BaseModel):
    """Body for unregistering a publishing surface."""

    name: str = Field(..., min_length=1)


class DeviceIdList(BaseModel):
    """Device ids the hub holds for one adapter."""

    device_ids: List[str] = Field(default_factory=list)
