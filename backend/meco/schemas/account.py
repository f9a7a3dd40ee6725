from pydantic import BaseModel


class AccountOut(BaseModel):
    username: str
    authorities: list[str]
