from typing import List
from pydantic import BaseModel


class DashboardTile(BaseModel):
    label: str
    href: str


class DashboardResponse(BaseModel):
    role: str
    title: str
    tiles: List[DashboardTile]
