"""User schemas."""

from coop_api.schemas.common import CamelModel


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    phone: str | None
    class_name: str | None
    role: str
