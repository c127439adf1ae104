"""Entity Contracts - Clients, services and professionals of a salon."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.contracts.appointment import RecurrenceFrequency, check_duration


class Client(BaseModel):
    """Schema de cliente."""

    id: str = Field(..., min_length=1, description="ID único do cliente")
    name: str = Field(..., min_length=1, description="Nome do cliente")
    phone: str | None = Field(None, description="Telefone")
    whatsapp: str = Field("", description="Número de WhatsApp")
    email: str | None = Field(None, description="E-mail")
    birthday: date | None = Field(None, description="Aniversário (sem horário)")
    recurrence: RecurrenceFrequency = Field(
        default=RecurrenceFrequency.NONE,
        description="Frequência preferida de retorno",
    )
    color: str | None = Field(None, description="Cor do cliente no calendário")
    owner_id: str = Field(..., min_length=1, description="ID do salão (dono)")

    model_config = ConfigDict(from_attributes=True)


class Service(BaseModel):
    """Schema de serviço oferecido pelo salão."""

    id: str = Field(..., min_length=1, description="ID único do serviço")
    name: str = Field(..., min_length=1, description="Nome do serviço")
    price: float = Field(..., ge=0, description="Preço")
    duration_minutes: int = Field(..., description="Duração padrão em minutos")
    owner_id: str | None = Field(None, description="ID do salão (dono)")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        return check_duration(v)


class Professional(BaseModel):
    """Schema de profissional (o próprio dono ou funcionário)."""

    id: str = Field(..., min_length=1, description="ID único do profissional")
    name: str = Field(..., min_length=1, description="Nome do profissional")
    color: str | None = Field(None, description="Cor do profissional no calendário")
    owner_id: str | None = Field(None, description="ID do salão (dono)")

    model_config = ConfigDict(from_attributes=True)
