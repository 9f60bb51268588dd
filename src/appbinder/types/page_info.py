from typing import final

from pydantic import BaseModel
from pydantic import ConfigDict


@final
class PageInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    route: str = "/"
