from pydantic import BaseModel, ConfigDict, Field


class Task(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    content: str
    completed: bool


class TaskList(BaseModel):
    tasks: list[Task]


class MessageResponse(BaseModel):
    message: str
