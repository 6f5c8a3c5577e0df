from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Identity(BaseModel):
    """Identidad verificada extraída del token por la dependencia de autenticación."""
    id: str
    username: str
    role: str

    class Config:
        frozen = True


class ComplejoCreate(BaseModel):
    # NOTA: la contraseña se guarda y se devuelve en texto plano (defecto conocido)
    username: str
    password: str
    role: str
    gender: str
    weight: str = ""
    height: str = ""
    bench: str = ""
    squad: str = ""
    dl: str = ""
    photo: str = ""


class Complejo(ComplejoCreate):
    id: str = Field(alias="_id")
    imc: str = ""
    # Los documentos actualizados por un admin pueden no traer todos los campos
    username: str = ""
    password: str = ""
    role: str = ""
    gender: str = ""

    class Config:
        populate_by_name = True


class EventCreate(BaseModel):
    title: str
    description: str
    date: datetime
    location: str
    participants: List[str] = Field(default_factory=list)
    image: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        # MongoDB guarda en UTC y devuelve fechas naive
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Event(EventCreate):
    id: str = Field(alias="_id")

    class Config:
        populate_by_name = True
