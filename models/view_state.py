from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from models.post import Post


class ListView(BaseModel):
    mode: Literal["list"] = "list"


class CreateView(BaseModel):
    mode: Literal["create"] = "create"


class DetailView(BaseModel):
    mode: Literal["detail"] = "detail"
    post: Post


ViewState = Annotated[Union[ListView, CreateView, DetailView], Field(discriminator="mode")]
