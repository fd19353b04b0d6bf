"""Tests for AlertReconciler.register_warnings."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import select

from adwarn.alerts.errors import SourceFetchError, StoreError
from adwarn.alerts.reconciler import AlertReconciler
from adwarn.alerts.repository import AlertRepository
from adwarn.alerts.validity import ValiditySweeper
from adwarn.models.alert_history import AlertHistory, AlertSeverity, AlertStatus
from tests.fakes import FakeWarningSource

TS_WARNING = {"mensagem": "AD WRNG SBMQ 010000/010600 TS OBSC", "tipo": "AVISO"}


class TestRegisterWarningsScenarios:
    """End-to-end behaviour against the SQLite store."""

    @pytest.mark.asyncio
    async def test_fresh_warning_is_inserted(self, db_session):
        source = FakeWarningSource({"SBMQ": [TS_WARNING]})
        reconciler = AlertReconciler(source=source, repository=AlertRepository(db_session))

        result = await reconciler.register_warnings("SBMQ")

        assert result.ok is True
        assert result.inserted == 1
        assert result.already_active == 0
        assert result.sample_message == "AD WRNG SBMQ 010000/010600 TS OBSC"
        assert result.should_alarm is True

        record = (await db_session.execute(select(AlertHistory))).scalar_one()
        assert record.icao == "SBMQ"
        assert record.status == AlertStatus.ACTIVE
        assert record.severity == AlertSeverity.LOW
        assert record.raw_data == TS_WARNING

    @pytest.mark.asyncio
    async def test_second_call_is_idempotent(self, db_session):
        source = FakeWarningSource(
            {"SBMQ": [TS_WARNING, {"mensagem": "AD WRNG SBMQ RWY CLOSED", "tipo": "AVISO"}]}
        )
        reconciler = AlertReconciler(source=source, repository=AlertRepository(db_session))

        first = await reconciler.register_warnings("SBMQ")
        second = await reconciler.register_warnings("SBMQ")

        assert (first.inserted, first.already_active) == (2, 0)
        assert (second.inserted, second.already_active) == (0, 2)
        assert second.should_alarm is False

    @pytest.mark.asyncio
    async def test_duplicate_in_same_response_counted_once(self, db_session):
        source = FakeWarningSource({"SBMQ": [TS_WARNING, dict(TS_WARNING)]})
        reconciler = AlertReconciler(source=source, repository=AlertRepository(db_session))

        result = await reconciler.register_warnings("SBMQ")

        assert (result.inserted, result.already_active) == (1, 1)
        rows = (await db_session.execute(select(AlertHistory.id))).all()
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_same_text_other_icao_is_separate(self, db_session):
        source = FakeWarningSource({"SBMQ": [TS_WARNING], "SBBE": [TS_WARNING]})
        reconciler = AlertReconciler(source=source, repository=AlertRepository(db_session))

        await reconciler.register_warnings("SBMQ")
        result = await reconciler.register_warnings("SBBE")

        assert result.inserted == 1

    @pytest.mark.asyncio
    async def test_lapsed_warning_alarms_again(self, db_session):
        warning = {
            **TS_WARNING,
            "data_validade_ini": "2024-01-01 00:00:00",
            "data_validade_fim": "2024-01-01 06:00:00",
        }
        repo = AlertRepository(db_session)
        reconciler = AlertReconciler(source=FakeWarningSource({"SBMQ": [warning]}), repository=repo)

        assert (await reconciler.register_warnings("SBMQ")).inserted == 1

        sweep = await ValiditySweeper(repo).expire_out_of_window_active_alerts(
            now=datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)
        )
        assert sweep.expired == 1

        again = await reconciler.register_warnings("SBMQ")
        assert again.inserted == 1

        statuses = (await db_session.execute(select(AlertHistory.status))).scalars().all()
        assert sorted(statuses) == ["active", "expired"]

    @pytest.mark.asyncio
    async def test_lowercase_icao_is_uppercased(self, db_session):
        source = FakeWarningSource({"SBMQ": [TS_WARNING]})
        reconciler = AlertReconciler(source=source, repository=AlertRepository(db_session))

        result = await reconciler.register_warnings("sbmq")

        assert result.inserted == 1
        assert source.calls == ["SBMQ"]


class TestRegisterWarningsGuards:
    """Behaviour with a mocked repository."""

    @pytest.mark.asyncio
    async def test_quiet_aerodrome_never_touches_store(self):
        repo = AsyncMock()
        source = FakeWarningSource({"SBMQ": [{"mensagem": "METAR SBMQ 011200Z", "tipo": "METAR"}]})

        result = await AlertReconciler(source=source, repository=repo).register_warnings("SBMQ")

        assert result.ok is True
        assert (result.inserted, result.already_active) == (0, 0)
        assert result.sample_message is None
        repo.find_active.assert_not_called()
        repo.insert_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_source_response(self):
        repo = AsyncMock()
        result = await AlertReconciler(
            source=FakeWarningSource(), repository=repo
        ).register_warnings("SBMQ")

        assert result.ok is True
        repo.find_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_source_error_returns_failure_without_writes(self):
        repo = AsyncMock()
        source = FakeWarningSource(error=SourceFetchError("REDEMET returned 503"))

        result = await AlertReconciler(source=source, repository=repo).register_warnings("SBMQ")

        assert result.ok is False
        assert result.error == "REDEMET returned 503"
        assert result.should_alarm is False
        repo.insert_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_active_is_not_inserted(self):
        repo = AsyncMock()
        repo.find_active = AsyncMock(return_value=uuid4())

        result = await AlertReconciler(
            source=FakeWarningSource({"SBMQ": [TS_WARNING]}), repository=repo
        ).register_warnings("SBMQ")

        assert (result.inserted, result.already_active) == (0, 1)
        repo.find_active.assert_called_once_with(
            "SBMQ", "AVISO", "AD WRNG SBMQ 010000/010600 TS OBSC"
        )
        repo.insert_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_lost_insert_race_counts_as_already_active(self):
        repo = AsyncMock()
        repo.find_active = AsyncMock(return_value=None)
        repo.insert_active = AsyncMock(return_value=False)

        result = await AlertReconciler(
            source=FakeWarningSource({"SBMQ": [TS_WARNING]}), repository=repo
        ).register_warnings("SBMQ")

        assert (result.inserted, result.already_active) == (0, 1)

    @pytest.mark.asyncio
    async def test_store_error_aborts_without_rollback_of_earlier_inserts(self):
        repo = AsyncMock()
        repo.find_active = AsyncMock(return_value=None)
        repo.insert_active = AsyncMock(side_effect=[True, StoreError("insert failed")])
        source = FakeWarningSource(
            {
                "SBMQ": [
                    TS_WARNING,
                    {"mensagem": "AD WRNG SBMQ RWY CLOSED", "tipo": "AVISO"},
                    {"mensagem": "AD WRNG SBMQ WIND", "tipo": "AVISO"},
                ]
            }
        )

        result = await AlertReconciler(source=source, repository=repo).register_warnings("SBMQ")

        assert result.ok is False
        assert result.error == "insert failed"
        assert repo.insert_active.call_count == 2

    @pytest.mark.asyncio
    async def test_find_active_error_aborts(self):
        repo = AsyncMock()
        repo.find_active = AsyncMock(side_effect=StoreError("select failed"))

        result = await AlertReconciler(
            source=FakeWarningSource({"SBMQ": [TS_WARNING]}), repository=repo
        ).register_warnings("SBMQ")

        assert result.ok is False
        repo.insert_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_severity_and_fallbacks_on_insert(self):
        repo = AsyncMock()
        repo.find_active = AsyncMock(return_value=None)
        repo.insert_active = AsyncMock(return_value=True)
        source = FakeWarningSource({"SBMQ": [{"mens": "", "tipo": "Aviso de aeródromo"}]})

        result = await AlertReconciler(source=source, repository=repo).register_warnings("SBMQ")

        alert = repo.insert_active.call_args.args[0]
        assert alert.content == "(sem mensagem)"
        assert alert.alert_type == "Aviso de aeródromo"
        assert alert.severity == AlertSeverity.LOW
        assert result.sample_message is None

    @pytest.mark.asyncio
    async def test_sample_message_is_first_in_source_order(self):
        repo = AsyncMock()
        repo.find_active = AsyncMock(return_value=uuid4())
        source = FakeWarningSource(
            {
                "SBMQ": [
                    {"mensagem": "METAR SBMQ", "tipo": "METAR"},
                    {"mensagem": "Z AD WRNG", "tipo": "AVISO"},
                    {"mensagem": "A AD WRNG", "tipo": "AVISO"},
                ]
            }
        )

        result = await AlertReconciler(source=source, repository=repo).register_warnings("SBMQ")

        assert result.sample_message == "Z AD WRNG"
