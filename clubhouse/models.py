# clubhouse/models.py

from typing import Optional
from pydantic import NaiveDatetime

from sqlmodel import SQLModel, Field

from .permissions import PermissionLevel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    # Stored as a bare integer; legacy rows may hold values outside PermissionLevel
    permission: Optional[int] = Field(default=int(PermissionLevel.REGULAR))


class Club(SQLModel, table=True):
    __tablename__ = "clubs"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str


class ClubMembership(SQLModel, table=True):
    __tablename__ = "users_to_clubs"

    user_id: int = Field(foreign_key="users.id", primary_key=True)
    club_id: int = Field(foreign_key="clubs.id", primary_key=True)


class Address(SQLModel, table=True):
    __tablename__ = "addresses"

    id: Optional[int] = Field(default=None, primary_key=True)
    number: int = Field(index=True)
    description: str
    in_use: bool = False
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    club_id: int = Field(foreign_key="clubs.id", index=True)


class Consist(SQLModel, table=True):
    __tablename__ = "consists"

    id: Optional[int] = Field(default=None, primary_key=True)
    number: int = Field(index=True)
    in_use: bool = False
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    club_id: int = Field(foreign_key="clubs.id", index=True)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Local wall-clock time, stored without an offset
    schedule: NaiveDatetime = Field(index=True)
    duration: int  # minutes
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    club_id: int = Field(foreign_key="clubs.id", index=True)
