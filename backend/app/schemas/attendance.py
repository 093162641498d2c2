# app/schemas/attendance.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AttendanceUpsert(BaseModel):
    member_id: str = Field(alias="memberId")
    service_id: str = Field(alias="serviceId")
    attended: bool = False
    took_communion: bool = Field(default=False, alias="tookCommunion")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _communion_requires_attendance(self) -> "AttendanceUpsert":
        if self.took_communion and not self.attended:
            raise ValueError("tookCommunion requires attended")
        return self


class AttendanceRead(BaseModel):
    id: str
    member_id: str = Field(serialization_alias="memberId")
    service_id: str = Field(serialization_alias="serviceId")
    attended: bool
    took_communion: bool = Field(serialization_alias="tookCommunion")

    model_config = ConfigDict(from_attributes=True)
