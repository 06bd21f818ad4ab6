"""
Boundary schema for the government flood/shelter feeds.

Every raw feed element is parsed into either a validated record or a
`Rejected` carrying the reason. Nothing downstream probes raw dicts.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from floodline.models.flood import FloodSeverity, FloodStatus
from floodline.models.shelter import ShelterStatus

T = TypeVar("T", bound="GovRecord")


@dataclass(frozen=True)
class Rejected:
    reason: str


class GovRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lat: float
    lng: float

    @model_validator(mode="before")
    @classmethod
    def lift_nested_location(cls, data: Any) -> Any:
        # Feeds send either top-level lat/lng or location.lat/location.lng
        if isinstance(data, dict) and isinstance(data.get("location"), dict):
            data = dict(data)
            for axis in ("lat", "lng"):
                if data.get(axis) is None:
                    data[axis] = data["location"].get(axis)
        return data

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def require_number(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("must be present as a number")
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v

    @staticmethod
    def _blank_to_none(v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class GovFloodRecord(GovRecord):
    title: str
    description: Optional[str] = None
    severity: Optional[FloodSeverity] = None
    status: Optional[FloodStatus] = None

    @field_validator("title")
    @classmethod
    def require_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("description", "severity", "status", mode="before")
    @classmethod
    def blank_optional(cls, v: Any) -> Any:
        return cls._blank_to_none(v)

    @property
    def natural_key(self) -> Tuple[str, float, float]:
        return (self.title, self.lat, self.lng)


class GovShelterRecord(GovRecord):
    name: str
    capacity: Optional[int] = Field(default=None, ge=0)
    facilities: Optional[str] = None
    contact: Optional[str] = None
    status: Optional[ShelterStatus] = None

    @field_validator("name")
    @classmethod
    def require_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("capacity", "facilities", "contact", "status", mode="before")
    @classmethod
    def blank_optional(cls, v: Any) -> Any:
        return cls._blank_to_none(v)

    @property
    def natural_key(self) -> Tuple[str, float, float]:
        return (self.name, self.lat, self.lng)


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{where}: {err.get('msg')}")
    return "; ".join(parts)


def parse_record(model: Type[T], raw: Any) -> Union[T, Rejected]:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        return Rejected(reason=_describe(e))


def parse_flood_record(raw: Any) -> Union[GovFloodRecord, Rejected]:
    return parse_record(GovFloodRecord, raw)


def parse_shelter_record(raw: Any) -> Union[GovShelterRecord, Rejected]:
    return parse_record(GovShelterRecord, raw)
