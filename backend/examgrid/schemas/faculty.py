from pydantic import BaseModel, Field


class FacultyBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    duration: int = Field(default=4, ge=1, le=8)


class FacultyCreate(FacultyBase):
    pass


class FacultyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    duration: int | None = Field(default=None, ge=1, le=8)


class FacultyOut(FacultyBase):
    id: str

    model_config = {"from_attributes": True}
