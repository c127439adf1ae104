"""Appointment Contract - Models for appointment management."""

import re
from datetime import date, datetime, time, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"
MIN_DURATION_MINUTES = 5
DURATION_STEP_MINUTES = 5


class AppointmentStatus(str, Enum):
    """Status possíveis de um agendamento."""

    PENDING = "pending"
    CANCELLED = "cancelled"


class RecurrenceFrequency(str, Enum):
    """Frequências de recorrência suportadas."""

    NONE = "none"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


def check_calendar_date(value: str) -> str:
    """Garante que a string YYYY-MM-DD representa uma data real."""
    if not re.fullmatch(DATE_PATTERN, value):
        raise ValueError("Data inválida (use YYYY-MM-DD)")
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise ValueError("Data inválida (use YYYY-MM-DD)") from e
    return value


def check_clock_time(value: str) -> str:
    """Garante que a string HH:mm representa um horário real."""
    if not re.fullmatch(TIME_PATTERN, value):
        raise ValueError("Hora inválida (use HH:mm)")
    hours, minutes = (int(part) for part in value.split(":"))
    if hours > 23 or minutes > 59:
        raise ValueError("Hora inválida (use HH:mm)")
    return value


def check_cost(value: float) -> float:
    """Custo nunca negativo."""
    if value < 0:
        raise ValueError("Custo deve ser maior ou igual a 0")
    return value


def check_duration(value: int) -> int:
    """Duração mínima de 5 minutos, sempre em múltiplos de 5."""
    if value < MIN_DURATION_MINUTES:
        raise ValueError("Duração mínima é 5 minutos")
    if value % DURATION_STEP_MINUTES != 0:
        raise ValueError("Duração deve ser múltipla de 5 minutos")
    return value


class Recurrence(BaseModel):
    """Descritor de recorrência de um agendamento."""

    frequency: RecurrenceFrequency = Field(
        default=RecurrenceFrequency.NONE,
        description="Frequência de repetição",
    )
    end_date: str | None = Field(
        None,
        description="Última data possível da série (inclusiva)",
    )

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return check_calendar_date(v)

    @property
    def is_recurring(self) -> bool:
        """Verifica se a regra gera ocorrências extras."""
        return self.frequency != RecurrenceFrequency.NONE


class AppointmentInput(BaseModel):
    """Dados enviados pelo formulário para salvar um agendamento.

    Com `id` preenchido a operação é uma edição. `duration_minutes` e `cost`
    assumem a duração e o preço do serviço quando omitidos.
    """

    id: str | None = Field(
        None,
        description="ID do agendamento em edição",
    )
    client_id: str = Field(..., min_length=1, description="ID do cliente")
    service_id: str = Field(..., min_length=1, description="ID do serviço")
    professional_id: str = Field(
        ..., min_length=1, description="ID do profissional"
    )
    scheduled_date: str = Field(
        ...,
        description="Data do agendamento (YYYY-MM-DD)",
    )
    scheduled_time: str = Field(
        ...,
        description="Hora do agendamento (HH:mm)",
    )
    duration_minutes: int | None = Field(
        None,
        description="Duração em minutos",
    )
    cost: float | None = Field(
        None,
        description="Valor cobrado",
    )
    recurrence: Recurrence = Field(
        default_factory=Recurrence,
        description="Regra de recorrência",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "client_id": "cli_123",
                "service_id": "srv_456",
                "professional_id": "pro_789",
                "scheduled_date": "2025-06-10",
                "scheduled_time": "14:00",
                "duration_minutes": 30,
                "cost": 80.0,
                "recurrence": {"frequency": "weekly", "end_date": "2025-07-01"},
            }
        }
    )

    @field_validator("scheduled_date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return check_calendar_date(v)

    @field_validator("scheduled_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return check_clock_time(v)

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int | None) -> int | None:
        if v is None:
            return v
        return check_duration(v)

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v: float | None) -> float | None:
        if v is None:
            return v
        return check_cost(v)


class Appointment(BaseModel):
    """Schema completo de agendamento (leitura e escrita no DB)."""

    id: str | None = Field(
        None,
        description="ID único do agendamento, atribuído pelo banco",
    )
    client_id: str = Field(..., min_length=1, description="ID do cliente")
    service_id: str = Field(..., min_length=1, description="ID do serviço")
    professional_id: str = Field(
        ..., min_length=1, description="ID do profissional"
    )
    owner_id: str = Field(..., min_length=1, description="ID do salão (dono)")
    client_name: str = Field("", description="Nome do cliente no momento do agendamento")
    service_name: str = Field("", description="Nome do serviço no momento do agendamento")
    professional_name: str = Field(
        "", description="Nome do profissional no momento do agendamento"
    )
    client_color: str = Field("", description="Cor do cliente (#RRGGBB)")
    professional_color: str = Field("", description="Cor do profissional (#RRGGBB)")
    scheduled_date: str = Field(..., description="Data")
    scheduled_time: str = Field(..., description="Hora")
    duration_minutes: int = Field(..., description="Duração em minutos")
    cost: float = Field(..., description="Valor cobrado")
    status: AppointmentStatus = Field(
        default=AppointmentStatus.PENDING,
        description="Status atual",
    )
    recurrence: Recurrence = Field(
        default_factory=Recurrence,
        description="Regra de recorrência usada na criação",
    )
    created_at: datetime | None = Field(None, description="Data de criação")
    updated_at: datetime | None = Field(None, description="Data de atualização")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "client_id": "cli_123",
                "service_id": "srv_456",
                "professional_id": "pro_789",
                "owner_id": "owner_1",
                "client_name": "Maria",
                "service_name": "Corte",
                "professional_name": "Ana",
                "client_color": "#ff8800",
                "professional_color": "#3788d8",
                "scheduled_date": "2025-06-10",
                "scheduled_time": "14:00",
                "duration_minutes": 30,
                "cost": 80.0,
                "status": "pending",
                "recurrence": {"frequency": "none"},
                "created_at": "2025-06-01T10:00:00Z",
            }
        },
    )

    @field_validator("scheduled_date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return check_calendar_date(v)

    @field_validator("scheduled_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return check_clock_time(v)

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        return check_duration(v)

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v: float) -> float:
        return check_cost(v)

    @model_validator(mode="after")
    def require_recurrence_end(self) -> "Appointment":
        if self.recurrence.is_recurring and self.recurrence.end_date is None:
            raise ValueError("Data final é obrigatória para agendamentos recorrentes")
        return self

    @property
    def day(self) -> date:
        """Data do agendamento como `date`."""
        return date.fromisoformat(self.scheduled_date)

    @property
    def slot(self) -> tuple[str, str]:
        """Par (data, hora) ocupado pelo agendamento."""
        return self.scheduled_date, self.scheduled_time

    def starts_at(self, tz: ZoneInfo) -> datetime:
        """Início do agendamento no fuso horário local fixo."""
        return datetime.combine(self.day, time.fromisoformat(self.scheduled_time), tz)

    def ends_at(self, tz: ZoneInfo) -> datetime:
        """Fim do agendamento (início + duração)."""
        return self.starts_at(tz) + timedelta(minutes=self.duration_minutes)

    def to_row(self) -> dict:
        """Serializa para inserção/atualização na tabela `appointments`.

        `id` e `created_at` são atribuídos pelo banco e nunca enviados.
        """
        return self.model_dump(mode="json", exclude={"id", "created_at"})
