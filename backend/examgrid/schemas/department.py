from pydantic import BaseModel, Field


class DepartmentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    faculty_id: str = Field(min_length=1, max_length=36)


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)


class DepartmentOut(DepartmentBase):
    id: str

    model_config = {"from_attributes": True}


class DepartmentSummary(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}
