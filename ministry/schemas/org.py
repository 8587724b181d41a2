from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class RegionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class UniversityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    region_id: int = Field(gt=0)


class UniversityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    region_id: int


class SmallGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    university_id: int = Field(gt=0)
    region_id: int = Field(gt=0)


class SmallGroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    university_id: int
    region_id: int


class AlumniGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    region_id: int = Field(gt=0)


class AlumniGroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    region_id: int
