"""Unit Tests - Scheduling Orchestrator."""

import pytest

from src.contracts.appointment import AppointmentStatus, RecurrenceFrequency
from src.core.errors import (
    AppointmentValidationError,
    NotFound,
    ReferenceNotFound,
    SeriesIncomplete,
    SlotConflict,
)
from src.core.scheduler import EntityLookup, resolve_references
from tests.fakes import OWNER_ID


def _stored(fake_supabase) -> list[dict]:
    return sorted(
        fake_supabase.tables["appointments"], key=lambda r: r["scheduled_date"]
    )


class TestSaveAppointmentValidation:
    """Tests for structural validation reported field by field."""

    @pytest.mark.parametrize(
        ("duration", "message"),
        [
            (32, "Duração deve ser múltipla de 5 minutos"),
            (0, "Duração mínima é 5 minutos"),
        ],
    )
    async def test_invalid_duration(
        self, scheduling, lookups, owner_id, sample_input, duration, message
    ) -> None:
        """Test duration must be a positive multiple of 5."""
        sample_input["duration_minutes"] = duration

        with pytest.raises(AppointmentValidationError) as exc_info:
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        errors = exc_info.value.errors
        assert [(e.field, e.message) for e in errors] == [("duration_minutes", message)]

    async def test_reports_every_invalid_field(
        self, scheduling, lookups, owner_id, sample_input
    ) -> None:
        """Test that all invalid fields are reported with their path."""
        sample_input.update(
            {
                "client_id": "",
                "scheduled_date": "10/06/2025",
                "scheduled_time": "25:00",
                "cost": -1,
            }
        )

        with pytest.raises(AppointmentValidationError) as exc_info:
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        fields = {e.field for e in exc_info.value.errors}
        assert fields == {"client_id", "scheduled_date", "scheduled_time", "cost"}

    async def test_missing_required_field(
        self, scheduling, lookups, owner_id, sample_input
    ) -> None:
        """Test that a missing field is reported."""
        del sample_input["service_id"]

        with pytest.raises(AppointmentValidationError) as exc_info:
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        assert exc_info.value.errors[0].field == "service_id"

    async def test_invalid_recurrence_end_date_path(
        self, scheduling, lookups, owner_id, sample_input
    ) -> None:
        """Test nested field paths."""
        sample_input["recurrence"] = {"frequency": "weekly", "end_date": "2025-02-30"}

        with pytest.raises(AppointmentValidationError) as exc_info:
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        assert exc_info.value.errors[0].field == "recurrence.end_date"

    async def test_nothing_persisted_on_invalid_input(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test that validation happens before any store access."""
        sample_input["duration_minutes"] = 7

        with pytest.raises(AppointmentValidationError):
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        assert fake_supabase.calls == []


class TestReferenceResolution:
    """Tests for client/service/professional resolution."""

    def test_resolves_from_provided_sets(self, scheduling, lookups, sample_input) -> None:
        """Test resolution is a pure lookup in the given sets."""
        parsed = scheduling.parse_input(sample_input)

        client, service, professional = resolve_references(parsed, lookups)

        assert (client.id, service.id, professional.id) == ("cli-1", "srv-1", "pro-1")

    async def test_unknown_professional(
        self, scheduling, lookups, owner_id, sample_input
    ) -> None:
        """Test missing reference fails with a single message."""
        sample_input["professional_id"] = "pro-404"

        with pytest.raises(ReferenceNotFound) as exc_info:
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        assert exc_info.value.message == "Cliente, serviço ou profissional não encontrado."

    async def test_empty_lookup_sets(self, scheduling, owner_id, sample_input) -> None:
        """Test that no ambient state is used when sets are empty."""
        with pytest.raises(ReferenceNotFound):
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=EntityLookup()
            )


class TestSaveAppointmentCreate:
    """Tests for the create path."""

    async def test_single_appointment(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test frequency none creates exactly one pending record."""
        appointment_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        rows = fake_supabase.tables["appointments"]
        assert len(rows) == 1
        assert rows[0]["id"] == appointment_id
        assert rows[0]["status"] == AppointmentStatus.PENDING.value

    async def test_snapshot_fields(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test that names and colors are copied from the resolved entities."""
        await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        row = fake_supabase.tables["appointments"][0]
        assert row["client_name"] == "Maria Souza"
        assert row["service_name"] == "Corte Feminino"
        assert row["professional_name"] == "Ana"
        assert row["client_color"] == "#ff8800"
        # Professional without color gets the default calendar color
        assert row["professional_color"] == "#3788d8"
        assert row["owner_id"] == owner_id

    async def test_duration_and_cost_default_to_service(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test omitted duration and cost come from the service."""
        del sample_input["duration_minutes"]
        del sample_input["cost"]

        await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        row = fake_supabase.tables["appointments"][0]
        assert row["duration_minutes"] == 45
        assert row["cost"] == 80.0

    async def test_zero_cost_is_kept(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test that an explicit zero cost is not replaced by the price."""
        sample_input["cost"] = 0

        await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        assert fake_supabase.tables["appointments"][0]["cost"] == 0

    async def test_slot_conflict_scenario(
        self, scheduling, lookups, owner_id, sample_input
    ) -> None:
        """Test A at 2025-06-10 14:00 blocks B until A is cancelled."""
        first_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )
        other = {**sample_input, "client_id": "cli-2"}

        with pytest.raises(SlotConflict):
            await scheduling.save_appointment(other, owner_id=owner_id, lookups=lookups)

        await scheduling.delete_appointment(first_id, owner_id=OWNER_ID)
        second_id = await scheduling.save_appointment(
            other, owner_id=owner_id, lookups=lookups
        )

        assert second_id != first_id


class TestSaveAppointmentRecurrence:
    """Tests for recurring series creation."""

    async def test_weekly_creates_base_plus_three(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test weekly rule ending 21 days after start."""
        sample_input["recurrence"] = {"frequency": "weekly", "end_date": "2025-07-01"}

        primary_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        rows = _stored(fake_supabase)
        assert [r["scheduled_date"] for r in rows] == [
            "2025-06-10",
            "2025-06-17",
            "2025-06-24",
            "2025-07-01",
        ]
        assert rows[0]["id"] == primary_id
        assert {r["scheduled_time"] for r in rows} == {"14:00"}
        assert len({r["id"] for r in rows}) == 4
        assert {r["client_name"] for r in rows} == {"Maria Souza"}

    async def test_monthly_clamps_short_months(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test monthly series from the 31st."""
        sample_input["scheduled_date"] = "2025-01-31"
        sample_input["recurrence"] = {"frequency": "monthly", "end_date": "2025-04-30"}

        await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        assert [r["scheduled_date"] for r in _stored(fake_supabase)] == [
            "2025-01-31",
            "2025-02-28",
            "2025-03-31",
            "2025-04-30",
        ]

    async def test_missing_end_date_defaults_to_three_months(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test the convenience default for the series end date."""
        sample_input["recurrence"] = {"frequency": "monthly"}

        await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        rows = _stored(fake_supabase)
        assert [r["scheduled_date"] for r in rows] == [
            "2025-06-10",
            "2025-07-10",
            "2025-08-10",
            "2025-09-10",
        ]
        assert rows[0]["recurrence"] == {
            "frequency": RecurrenceFrequency.MONTHLY.value,
            "end_date": "2025-09-10",
        }

    async def test_partial_series_is_kept(
        self, scheduling, repository, make_appointment, lookups, owner_id, sample_input
    ) -> None:
        """Test occurrence 3 failing keeps occurrences 1 and 2."""
        blocker = await repository.create(
            make_appointment(client_id="cli-2", scheduled_date="2025-06-24")
        )
        sample_input["recurrence"] = {"frequency": "weekly", "end_date": "2025-07-01"}

        with pytest.raises(SeriesIncomplete) as exc_info:
            await scheduling.save_appointment(
                sample_input, owner_id=owner_id, lookups=lookups
            )

        error = exc_info.value
        assert error.failed_date == "2025-06-24"
        assert len(error.created_ids) == 2
        assert error.primary_id == error.created_ids[0]
        assert isinstance(error.__cause__, SlotConflict)

        dates = sorted(a.scheduled_date for a in await repository.list_by_owner(owner_id))
        # No rollback and no attempt after the failure
        assert dates == ["2025-06-10", "2025-06-17", "2025-06-24"]
        assert blocker.id not in error.created_ids


class TestSaveAppointmentEdit:
    """Tests for the edit path and its create fallback."""

    async def test_edit_existing(
        self, scheduling, lookups, owner_id, sample_input, repository
    ) -> None:
        """Test editing keeps the id and updates fields."""
        appointment_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        saved_id = await scheduling.save_appointment(
            {**sample_input, "id": appointment_id, "scheduled_time": "16:30"},
            owner_id=owner_id,
            lookups=lookups,
        )

        stored = await repository.get(appointment_id, OWNER_ID)
        assert saved_id == appointment_id
        assert stored.scheduled_time == "16:30"
        assert stored.updated_at is not None

    async def test_edit_does_not_expand_recurrence(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test that only creation generates follow-up occurrences."""
        appointment_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        await scheduling.save_appointment(
            {
                **sample_input,
                "id": appointment_id,
                "recurrence": {"frequency": "weekly", "end_date": "2025-07-01"},
            },
            owner_id=owner_id,
            lookups=lookups,
        )

        assert len(fake_supabase.tables["appointments"]) == 1

    async def test_edit_missing_falls_back_to_create(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test update on a vanished id creates a new appointment."""
        new_id = await scheduling.save_appointment(
            {**sample_input, "id": "deleted-meanwhile"},
            owner_id=owner_id,
            lookups=lookups,
        )

        rows = fake_supabase.tables["appointments"]
        assert new_id != "deleted-meanwhile"
        assert [r["id"] for r in rows] == [new_id]

    async def test_edit_into_taken_slot(
        self, scheduling, lookups, owner_id, sample_input
    ) -> None:
        """Test moving an appointment onto an occupied slot."""
        await scheduling.save_appointment(
            {**sample_input, "scheduled_time": "09:00"},
            owner_id=owner_id,
            lookups=lookups,
        )
        moving_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        with pytest.raises(SlotConflict):
            await scheduling.save_appointment(
                {**sample_input, "id": moving_id, "scheduled_time": "09:00"},
                owner_id=owner_id,
                lookups=lookups,
            )


class TestDeleteAndList:
    """Tests for delete_appointment and list_appointments."""

    async def test_delete_cancels_by_default(
        self, scheduling, lookups, owner_id, sample_input, repository
    ) -> None:
        """Test that delete is a soft cancel."""
        appointment_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        await scheduling.delete_appointment(appointment_id, owner_id=OWNER_ID)

        stored = await repository.get(appointment_id, OWNER_ID)
        assert stored.status == AppointmentStatus.CANCELLED
        assert await scheduling.list_appointments(owner_id) == []

    async def test_permanent_delete(
        self, scheduling, lookups, owner_id, sample_input, repository
    ) -> None:
        """Test hard removal."""
        appointment_id = await scheduling.save_appointment(
            sample_input, owner_id=owner_id, lookups=lookups
        )

        await scheduling.delete_appointment(
            appointment_id, owner_id=OWNER_ID, permanent=True
        )

        assert await repository.get(appointment_id, OWNER_ID) is None

    async def test_delete_missing(self, scheduling) -> None:
        """Test delete on unknown id raises NotFound."""
        with pytest.raises(NotFound):
            await scheduling.delete_appointment("does-not-exist", owner_id=OWNER_ID)


class TestOwnerScoping:
    """Tests that one salon cannot touch another salon's appointments."""

    async def test_delete_other_owner(
        self, scheduling, repository, make_appointment, owner_id
    ) -> None:
        """Test cancel with another salon's id fails and keeps the record."""
        other = await repository.create(make_appointment(owner_id="owner-2"))

        with pytest.raises(NotFound):
            await scheduling.delete_appointment(other.id, owner_id=owner_id)

        stored = await repository.get(other.id, "owner-2")
        assert stored.status == AppointmentStatus.PENDING

    async def test_permanent_delete_other_owner(
        self, scheduling, repository, make_appointment, owner_id
    ) -> None:
        """Test hard delete with another salon's id fails."""
        other = await repository.create(make_appointment(owner_id="owner-2"))

        with pytest.raises(NotFound):
            await scheduling.delete_appointment(
                other.id, owner_id=owner_id, permanent=True
            )

        assert await repository.get(other.id, "owner-2") is not None

    async def test_edit_other_owner_creates_own_copy(
        self, scheduling, repository, make_appointment, lookups, owner_id, sample_input
    ) -> None:
        """Test an edit aimed at another salon's id becomes a new appointment."""
        other = await repository.create(
            make_appointment(owner_id="owner-2", scheduled_time="09:00")
        )

        new_id = await scheduling.save_appointment(
            {**sample_input, "id": other.id}, owner_id=owner_id, lookups=lookups
        )

        untouched = await repository.get(other.id, "owner-2")
        assert new_id != other.id
        assert untouched.owner_id == "owner-2"
        assert untouched.scheduled_time == "09:00"
        assert [a.id for a in await scheduling.list_appointments(owner_id)] == [new_id]

    async def test_edit_with_malformed_id_creates(
        self, scheduling, lookups, owner_id, sample_input, fake_supabase
    ) -> None:
        """Test a non-uuid id follows the update-to-create fallback."""
        new_id = await scheduling.save_appointment(
            {**sample_input, "id": "abc"}, owner_id=owner_id, lookups=lookups
        )

        assert new_id != "abc"
        assert [r["id"] for r in fake_supabase.tables["appointments"]] == [new_id]
