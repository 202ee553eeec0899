from pydantic import BaseModel, Field

from app.models.room import RoomType


class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=1000)
    type: RoomType
    building: str | None = Field(default=None, max_length=200)
    floor: int | None = Field(default=None, ge=-5, le=200)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    type: RoomType | None = None
    building: str | None = Field(default=None, max_length=200)
    floor: int | None = Field(default=None, ge=-5, le=200)


class RoomOut(RoomBase):
    id: int

    model_config = {"from_attributes": True}
