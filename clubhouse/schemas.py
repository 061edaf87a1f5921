# clubhouse/schemas.py

from pydantic import BaseModel, Field, model_validator
from datetime import datetime, date as Date
from typing import List, Optional

from .permissions import PermissionLevel


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserPublic(BaseModel):
    id: int
    email: str
    permission: Optional[int]
    permission_label: str
    club_ids: List[int] = []


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)


class PermissionUpdate(BaseModel):
    permission: PermissionLevel


class ClubCreate(BaseModel):
    name: str = Field(min_length=1)


class ClubPublic(BaseModel):
    id: int
    name: str


class MembershipCreate(BaseModel):
    user_id: int


class AddressCreate(BaseModel):
    number: int = Field(gt=0)
    description: str = Field(min_length=1)
    in_use: bool
    user_id: Optional[int] = None  # defaults to the caller


class AddressUpdate(BaseModel):
    number: int = Field(gt=0)
    description: str = Field(min_length=1)
    in_use: bool


class AddressPublic(BaseModel):
    id: int
    number: int
    description: str
    in_use: bool
    user_id: Optional[int]
    club_id: int


class ConsistCreate(BaseModel):
    number: int = Field(gt=0)
    in_use: bool
    user_id: Optional[int] = None


class ConsistUpdate(BaseModel):
    number: int = Field(gt=0)
    in_use: bool


class ConsistPublic(BaseModel):
    id: int
    number: int
    in_use: bool
    user_id: Optional[int]
    club_id: int


class AppointmentCreate(BaseModel):
    # Either a full timestamp, or a date plus a 12-hour slot such as "7:30 PM"
    schedule: Optional[datetime] = None
    date: Optional[Date] = None
    time: Optional[str] = None
    duration: int

    @model_validator(mode="after")
    def check_start(self):
        if self.schedule is None and (self.date is None or self.time is None):
            raise ValueError("Provide either schedule or both date and time")
        return self


class AppointmentPublic(BaseModel):
    id: int
    schedule: datetime
    duration: int
    user_id: Optional[int]
    club_id: int
    start_time: str  # 12-hour slot label


class AppointmentGroups(BaseModel):
    past: List[AppointmentPublic]
    future: List[AppointmentPublic]


class OpeningHoursResponse(BaseModel):
    date: Date
    day_name: str
    is_open: bool
    hours: str
    slots: List[str]


class WeekdayHours(BaseModel):
    day_name: str
    hours: str


class FridayEvening(BaseModel):
    date: Date
    attendees: List[int]
    attendee_count: int
    enough_attendees: bool
    is_user_attending: bool
    user_appointment_id: Optional[int] = None
