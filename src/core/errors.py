"""Erros do núcleo de agendamento.

Todas as falhas expostas ao chamador herdam de `SchedulingError` e carregam
uma mensagem curta, pronta para ser exibida ao usuário.
"""

from dataclasses import dataclass

from pydantic import ValidationError

DEFAULT_STORE_HINT = (
    "Verifique a conexão com o Supabase e se a tabela 'appointments' e seus "
    "índices foram criados (sql/schema.sql)."
)


@dataclass(frozen=True)
class FieldError:
    """Erro de validação de um campo específico."""

    field: str
    message: str


class SchedulingError(Exception):
    """Base para erros do núcleo de agendamento."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AppointmentValidationError(SchedulingError):
    """Entrada estruturalmente inválida, reportada campo a campo."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__(", ".join(e.message for e in errors))
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "AppointmentValidationError":
        """Converte um ValidationError do Pydantic em erros por campo."""
        errors = []
        for item in exc.errors():
            path = ".".join(str(part) for part in item["loc"]) or "__root__"
            ctx_error = item.get("ctx", {}).get("error")
            message = str(ctx_error) if ctx_error is not None else item["msg"]
            errors.append(FieldError(field=path, message=message))
        return cls(errors)


class ReferenceNotFound(SchedulingError):
    """Cliente, serviço ou profissional não encontrado."""


class SlotConflict(SchedulingError):
    """O horário já possui um agendamento pendente."""

    def __init__(self, scheduled_date: str, scheduled_time: str) -> None:
        super().__init__(
            f"Horário indisponível: já existe um agendamento em "
            f"{scheduled_date} às {scheduled_time}."
        )
        self.scheduled_date = scheduled_date
        self.scheduled_time = scheduled_time


class NotFound(SchedulingError):
    """Agendamento alvo de update/cancel/delete não existe."""

    def __init__(self, appointment_id: str) -> None:
        super().__init__(f"Agendamento {appointment_id} não encontrado.")
        self.appointment_id = appointment_id


class StoreUnavailable(SchedulingError):
    """Falha transitória no banco, com dica de correção."""

    def __init__(self, message: str, hint: str = DEFAULT_STORE_HINT) -> None:
        super().__init__(message)
        self.hint = hint


class SeriesIncomplete(SchedulingError):
    """Uma ocorrência da série falhou; as anteriores permanecem salvas."""

    def __init__(
        self,
        primary_id: str,
        created_ids: list[str],
        failed_date: str,
        reason: str,
    ) -> None:
        super().__init__(
            f"Série criada parcialmente: a ocorrência de {failed_date} falhou "
            f"({reason}). {len(created_ids)} agendamento(s) foram mantidos."
        )
        self.primary_id = primary_id
        self.created_ids = created_ids
        self.failed_date = failed_date
        self.reason = reason
