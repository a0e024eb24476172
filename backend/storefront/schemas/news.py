from pydantic import BaseModel


class NewsCreate(BaseModel):
    content: str = ""
