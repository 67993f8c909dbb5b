from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import address
from .errors import AddressFormatError


# Unknown keys are rejected at every level of the document.


class TopologyMeta(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = Field("Network", description="Human name for this topology")


class SystemSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ip: str = Field(..., description="Dotted-quad address, unique across the topology")
    role: Literal["host", "router"] = Field("host", description="host or router")
    name: Optional[str] = Field(default=None, description="Optional device name (e.g. router1, pc3)")

    @field_validator("ip")
    @classmethod
    def _ip_is_dotted_quad(cls, v: str) -> str:
        if not address.is_valid(v):
            raise ValueError(f"invalid IP address '{v}'")
        return address.canonical(v)


class SubnetSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cidr: str = Field(..., description="Subnet in CIDR notation, e.g. 192.168.1.0/24")
    systems: List[SystemSpec] = Field(default_factory=list)

    @field_validator("cidr")
    @classmethod
    def _cidr_is_valid(cls, v: str) -> str:
        try:
            base, prefix = address.parse_cidr(v)
        except AddressFormatError as e:
            raise ValueError(str(e)) from e
        return f"{base}/{prefix}"


class LinkSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    a: str = Field(..., description="Endpoint address")
    b: str = Field(..., description="Endpoint address")
    weight: int = Field(0, description="Link cost; required > 0 inside a subnet, ignored between routers")


class TopologyDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schemaVersion: int = Field(1, description="Schema version")
    meta: TopologyMeta = Field(default_factory=TopologyMeta)
    subnets: List[SubnetSpec] = Field(default_factory=list)
    links: List[LinkSpec] = Field(default_factory=list)
