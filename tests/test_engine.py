"""Tests for the survey selection engine (choose_survey / quarantine_survey)."""

import json
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from src.engine.engine import SurveyEngine
from src.engine.models import EngineConfig, SurveyDefinition, SurveyEventType
from src.engine.sampler import SamplingPolicy
from src.quarantine.models import MS_PER_DAY
from src.quarantine.store import QuarantineStore
from src.quarantine.storage.memory_storage import MemoryQuarantineBackend

NOW_MS = 1_700_000_000_000


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event_type, payload):
        self.events.append((event_type, payload))

    @property
    def types(self):
        return [t for t, _ in self.events]


def _make_engine(surveys=None, draw=0, user_sampling=False, now=NOW_MS, **config):
    recorder = Recorder()
    durable = MemoryQuarantineBackend()
    session = MemoryQuarantineBackend()
    clock = now if callable(now) else (lambda: now)
    store = QuarantineStore(durable=durable, session=session, clock=clock)
    draw_fn = draw if callable(draw) else (lambda: draw)
    engine = SurveyEngine(
        {"userSampling": user_sampling, "onEvent": recorder, **config},
        quarantine_store=store,
        sampler=SamplingPolicy(draw=draw_fn),
    )
    engine.set_survey_configurations(surveys or {})
    return engine, recorder, durable, session


def _survey(priority, percentage=100, quarantine=0, **extra):
    return {"priority": priority, "percentage": percentage, "quarantine": quarantine, **extra}


# ──────────────────────────── Candidate input ────────────────────────────


class TestCandidateInput:
    @pytest.mark.parametrize("candidates", [None, "", [], (), 0, " , ,"])
    def test_empty_input_returns_none_without_events(self, candidates):
        engine, recorder, _, _ = _make_engine({"A": _survey(1)})
        assert engine.choose_survey(candidates) is None
        assert recorder.events == []

    def test_comma_separated_string(self):
        engine, recorder, _, _ = _make_engine({"1": _survey(1), "2": _survey(2)})
        chosen = engine.choose_survey(" 1 , 2 ")
        assert chosen.survey_id == "2"

    def test_numeric_scalar_and_sequence(self):
        engine, _, _, _ = _make_engine({"2467": _survey(10)})
        assert engine.choose_survey(2467).survey_id == "2467"
        assert engine.choose_survey([2467, ""]).survey_id == "2467"

    def test_missing_config_for_every_unknown_id(self):
        engine, recorder, _, _ = _make_engine({"A": _survey(1)})
        assert engine.choose_survey(["X", "Y"]) is None
        assert recorder.events == [
            ("survey_missing_config", {"survey_id": "X"}),
            ("survey_missing_config", {"survey_id": "Y"}),
            ("survey_none_chosen", {"candidates": ["X", "Y"]}),
        ]

    def test_missing_config_is_not_fatal(self):
        engine, recorder, _, _ = _make_engine({"A": _survey(1)})
        assert engine.choose_survey("X,A").survey_id == "A"
        assert recorder.types[0] == "survey_missing_config"
        assert recorder.types[-1] == "survey_chosen"


# ──────────────────────────── Priority ────────────────────────────


class TestPriority:
    @pytest.mark.parametrize("candidates", ["low,high", "high,low"])
    def test_highest_priority_wins(self, candidates):
        engine, _, _, _ = _make_engine({"low": _survey(5), "high": _survey(10)})
        assert engine.choose_survey(candidates).survey_id == "high"

    def test_ties_keep_first_seen(self):
        engine, _, _, _ = _make_engine({"A": _survey(7), "B": _survey(7)})
        assert engine.choose_survey("A,B").survey_id == "A"
        assert engine.choose_survey("B,A").survey_id == "B"

    @pytest.mark.parametrize("low,high", [(1.2, 1.8), ("1.2", "1.8")])
    def test_fractional_priorities_truncate_and_tie(self, low, high):
        engine, _, _, _ = _make_engine({"A": _survey(low), "B": _survey(high)})
        assert engine.survey_configurations["A"].priority == 1
        assert engine.survey_configurations["B"].priority == 1
        # Empatan en 1: gana el primero visto
        assert engine.choose_survey("A,B").survey_id == "A"
        assert engine.choose_survey("B,A").survey_id == "B"

    def test_string_priority_is_normalized_on_install(self):
        engine, _, _, _ = _make_engine({"A": _survey("3"), "B": _survey("12")})
        assert engine.survey_configurations["B"].priority == 12
        assert engine.choose_survey("A,B").survey_id == "B"

    def test_invalid_priority_never_competes(self):
        engine, recorder, _, _ = _make_engine({"A": _survey("abc"), "B": _survey(None)})
        assert engine.choose_survey("A,B") is None
        # Se evalúa igual el sampling
        assert recorder.types == [
            "survey_included_by_sampling",
            "survey_included_by_sampling",
            "survey_none_chosen",
        ]

    def test_priority_zero_can_be_chosen(self):
        engine, _, _, _ = _make_engine({"A": _survey(0)})
        assert engine.choose_survey("A").survey_id == "A"

    def test_scenario_event_order(self):
        engine, recorder, _, _ = _make_engine({"A": _survey(1), "B": _survey(2)})
        chosen = engine.choose_survey("A,B")
        assert chosen.survey_id == "B"
        assert recorder.events == [
            ("survey_included_by_sampling", {"survey_id": "A", "percentage": 100}),
            ("survey_included_by_sampling", {"survey_id": "B", "percentage": 100}),
            ("survey_chosen", {"survey_id": "B", "priority": 2}),
        ]

    def test_returns_definition_with_passthrough_fields(self):
        engine, _, _, _ = _make_engine(
            {"2467": _survey(10, survey_name="101A", display="invitation_app", delay="1500")}
        )
        chosen = engine.choose_survey("2467")
        assert isinstance(chosen, SurveyDefinition)
        assert chosen.passthrough["display"] == "invitation_app"
        assert chosen.passthrough["delay"] == "1500"


# ──────────────────────────── Sampling ────────────────────────────


class TestSampling:
    @pytest.mark.parametrize(
        "draw,expected",
        [(0, True), (1, True), (50, True), (99, True), (100, True)],
    )
    def test_percentage_100_always_included(self, draw, expected):
        engine, _, _, _ = _make_engine({"A": _survey(1, percentage=100)}, draw=draw)
        assert (engine.choose_survey("A") is not None) is expected

    @pytest.mark.parametrize(
        "draw,expected",
        [(0, True), (1, False), (50, False), (99, False), (100, False)],
    )
    def test_percentage_0_only_on_draw_zero(self, draw, expected):
        engine, _, _, _ = _make_engine({"A": _survey(1, percentage=0)}, draw=draw)
        assert (engine.choose_survey("A") is not None) is expected

    @pytest.mark.parametrize("draw,expected", [(49, True), (50, True), (51, False)])
    def test_inclusive_threshold(self, draw, expected):
        engine, _, _, _ = _make_engine({"A": _survey(1, percentage="50")}, draw=draw)
        assert (engine.choose_survey("A") is not None) is expected

    def test_invalid_percentage_defaults_to_zero(self):
        engine, recorder, _, _ = _make_engine({"A": _survey(1, percentage="n/a")}, draw=1)
        assert engine.choose_survey("A") is None
        assert recorder.events[0] == (
            "survey_excluded_not_quarantined_event_sampling",
            {"survey_id": "A", "percentage": 0},
        )

    def test_one_draw_per_candidate(self):
        draw = MagicMock(side_effect=[10, 90])
        engine, _, _, _ = _make_engine(
            {"A": _survey(1, percentage=50), "B": _survey(2, percentage=50)}, draw=draw
        )
        assert engine.choose_survey("A,B").survey_id == "A"
        assert draw.call_count == 2


# ──────────────────────────── Quarantine on sampling ────────────────────────────


class TestQuarantineOnSampling:
    def test_included_survey_gets_durable_quarantine(self):
        engine, recorder, durable, _ = _make_engine({"A": _survey(1, quarantine="21")})
        engine.choose_survey("A")

        record = json.loads(durable.get("neb_A"))
        assert record == {"value": "true", "expiry": NOW_MS + 21 * MS_PER_DAY}
        assert recorder.events[:2] == [
            ("survey_quarantine_set_on_sample", {"survey_id": "A", "days": 21}),
            ("survey_included_by_sampling", {"survey_id": "A", "percentage": 100}),
        ]

    def test_no_write_without_quarantine_days(self):
        engine, recorder, durable, session = _make_engine({"A": _survey(1, quarantine=0)})
        engine.choose_survey("A")
        assert len(durable) == 0 and len(session) == 0
        assert "survey_quarantine_set_on_sample" not in recorder.types

    def test_unparsable_quarantine_days_skip_write(self):
        engine, _, durable, session = _make_engine({"A": _survey(1, quarantine="never")})
        engine.choose_survey("A")
        assert len(durable) == 0 and len(session) == 0

    def test_every_candidate_is_evaluated(self):
        engine, _, durable, _ = _make_engine(
            {"A": _survey(10, quarantine=7), "B": _survey(1, quarantine=7)}
        )
        assert engine.choose_survey("A,B").survey_id == "A"
        assert "neb_A" in durable
        assert "neb_B" in durable

    def test_second_call_is_blocked_by_quarantine(self):
        engine, recorder, _, _ = _make_engine({"A": _survey(1, quarantine=7)})
        assert engine.choose_survey("A") is not None
        recorder.events.clear()

        assert engine.choose_survey("A") is None
        assert recorder.events == [
            ("survey_quarantined_block", {"survey_id": "A"}),
            ("survey_none_chosen", {"candidates": ["A"]}),
        ]

    def test_quarantined_survey_never_chosen_and_not_sampled(self):
        draw = MagicMock(return_value=0)
        engine, _, _, _ = _make_engine({"A": _survey(1)}, draw=draw)
        engine.quarantine_survey("A", 10)
        assert engine.choose_survey("A") is None
        draw.assert_not_called()

    def test_user_sampling_quarantines_excluded_survey(self):
        engine, recorder, durable, _ = _make_engine(
            {"A": _survey(1, percentage=10, quarantine=7)}, draw=90, user_sampling=True
        )
        assert engine.choose_survey("A") is None
        assert json.loads(durable.get("neb_A"))["expiry"] == NOW_MS + 7 * MS_PER_DAY
        assert recorder.events[0] == (
            "survey_excluded_quarantined_user_sampling",
            {"survey_id": "A", "percentage": 10},
        )

    def test_event_sampling_does_not_quarantine_excluded_survey(self):
        engine, recorder, durable, session = _make_engine(
            {"A": _survey(1, percentage=10, quarantine=7)}, draw=90, user_sampling=False
        )
        assert engine.choose_survey("A") is None
        assert len(durable) == 0 and len(session) == 0
        assert recorder.types[0] == "survey_excluded_not_quarantined_event_sampling"

    def test_expired_quarantine_lets_survey_through(self):
        clock = MagicMock(return_value=NOW_MS)
        engine, _, durable, _ = _make_engine({"A": _survey(1, quarantine=1)}, now=clock)
        assert engine.choose_survey("A") is not None

        clock.return_value = NOW_MS + MS_PER_DAY + 1
        assert engine.choose_survey("A") is not None

    def test_custom_prefix(self):
        engine, _, durable, _ = _make_engine(
            {"A": _survey(1, quarantine=3)}, quarantine_key_prefix="svy:"
        )
        engine.choose_survey("A")
        assert "svy:A" in durable
        assert "neb_A" not in durable


# ──────────────────────────── Manual quarantine ────────────────────────────


class TestQuarantineSurvey:
    def test_zero_days_is_session_scoped(self):
        engine, recorder, durable, session = _make_engine()
        engine.quarantine_survey("A", 0)
        assert json.loads(session.get("neb_A")) == {"value": "true"}
        assert len(durable) == 0
        assert recorder.events == [
            ("survey_quarantined", {"survey_id": "A", "days": 0, "storage": "session"})
        ]

    @pytest.mark.parametrize("days", [None, "", "abc", -3])
    def test_falsy_or_invalid_days_is_session_scoped(self, days):
        engine, _, durable, session = _make_engine()
        engine.quarantine_survey("A", days)
        assert "neb_A" in session
        assert len(durable) == 0

    def test_days_is_durable_with_expiry(self):
        engine, recorder, durable, session = _make_engine()
        engine.quarantine_survey(2467, "10")
        record = json.loads(durable.get("neb_2467"))
        assert record["expiry"] == pytest.approx(NOW_MS + 10 * MS_PER_DAY, abs=1000)
        assert len(session) == 0
        assert recorder.events == [
            ("survey_quarantined", {"survey_id": "2467", "days": 10, "storage": "durable"})
        ]

    def test_manual_quarantine_blocks_selection(self):
        engine, _, _, _ = _make_engine({"A": _survey(1)})
        engine.quarantine_survey("A")
        assert engine.choose_survey("A") is None


# ──────────────────────────── Callbacks & config ────────────────────────────


class TestCallbacks:
    def test_failing_on_event_does_not_break_selection(self):
        on_event = MagicMock(side_effect=RuntimeError("boom"))
        engine = SurveyEngine(
            {"onEvent": on_event}, sampler=SamplingPolicy(draw=lambda: 0)
        ).set_survey_configurations({"A": _survey(1)})

        assert engine.choose_survey("A").survey_id == "A"
        assert on_event.call_count == 2

    def test_failing_logger_is_isolated(self):
        logger = MagicMock(side_effect=ValueError("bad logger"))
        engine = SurveyEngine(
            {"logger": logger}, sampler=SamplingPolicy(draw=lambda: 99)
        ).set_survey_configurations({"A": _survey(1, percentage=0)})

        assert engine.choose_survey("A") is None
        logger.assert_called_once()
        assert "excluded by sampling" in logger.call_args.args[0]

    def test_logger_receives_quarantine_diagnostic(self):
        messages = []
        engine = SurveyEngine({"logger": messages.append})
        engine.set_survey_configurations({"A": _survey(1)})
        engine.quarantine_survey("A", 1)
        engine.choose_survey("A")
        assert messages == ["SURVEY: survey A is quarantined"]

    def test_no_callbacks_configured(self):
        engine = SurveyEngine(sampler=SamplingPolicy(draw=lambda: 0))
        engine.set_survey_configurations({"A": _survey(1)})
        assert engine.choose_survey("A").survey_id == "A"


class TestConfiguration:
    def test_defaults(self):
        engine = SurveyEngine()
        assert engine.config.user_sampling is False
        assert engine.config.quarantine_key_prefix == "neb_"
        assert engine.config.on_event is None

    def test_set_config_merges_and_chains(self):
        engine = SurveyEngine({"quarantineKeyPrefix": "x_"})
        assert engine.set_config({"userSampling": True}) is engine
        assert engine.config.user_sampling is True
        assert engine.config.quarantine_key_prefix == "x_"

    def test_set_config_ignores_non_mapping(self):
        engine = SurveyEngine()
        engine.set_config("not a dict")
        engine.set_config(None)
        assert engine.config == EngineConfig()

    def test_set_config_replaces_event_callback(self):
        first, second = Recorder(), Recorder()
        engine = SurveyEngine({"on_event": first})
        engine.set_config({"on_event": second})
        engine.choose_survey("missing")
        assert first.events == []
        assert second.types == ["survey_missing_config", "survey_none_chosen"]

    def test_accepts_engine_config_instance(self):
        engine = SurveyEngine(EngineConfig(user_sampling=True))
        assert engine.config.user_sampling is True

    def test_registry_is_replaced_wholesale(self):
        engine, _, _, _ = _make_engine({"A": _survey(1)})
        engine.set_survey_configurations({"B": _survey(1)})
        assert list(engine.survey_configurations) == ["B"]

    def test_invalid_registry_becomes_empty(self):
        engine, recorder, _, _ = _make_engine({"A": _survey(1)})
        engine.set_survey_configurations(["A"])
        assert engine.survey_configurations == {}
        assert engine.choose_survey("A") is None
        assert recorder.types == ["survey_missing_config", "survey_none_chosen"]

    def test_non_mapping_entries_are_skipped(self):
        engine, _, _, _ = _make_engine({"A": "oops", "B": _survey(1)})
        assert list(engine.survey_configurations) == ["B"]

    def test_non_string_passthrough_key_installs(self):
        engine, _, _, _ = _make_engine(
            {"A": {**_survey(1), 1: "extra"}, "B": _survey(2)}
        )
        assert list(engine.survey_configurations) == ["A", "B"]
        assert engine.survey_configurations["A"].passthrough == {"1": "extra"}
        assert engine.choose_survey("A,B").survey_id == "B"

    def test_entry_that_fails_validation_is_skipped(self, caplog):
        with pytest.raises(ValidationError) as exc_info:
            SurveyDefinition.model_validate({})
        error = exc_info.value
        real_from_mapping = SurveyDefinition.from_mapping

        def from_mapping(survey_id, data):
            if survey_id == "bad":
                raise error
            return real_from_mapping(survey_id, data)

        with patch.object(SurveyDefinition, "from_mapping", side_effect=from_mapping):
            with caplog.at_level("WARNING", logger="survey.engine"):
                engine, _, _, _ = _make_engine({"bad": _survey(9), "B": _survey(1)})

        assert list(engine.survey_configurations) == ["B"]
        assert "bad" in caplog.text
        assert engine.choose_survey("bad,B").survey_id == "B"

    def test_non_callable_on_event_is_ignored(self):
        engine = SurveyEngine({"onEvent": "not callable", "userSampling": True})
        assert engine.config.on_event is None
        assert engine.config.user_sampling is True
        engine.set_survey_configurations({"A": _survey(1)})
        assert engine.choose_survey("A").survey_id == "A"

    def test_event_type_values_match_wire_names(self):
        assert SurveyEventType.CHOSEN == "survey_chosen"
        assert len(SurveyEventType) == 9
