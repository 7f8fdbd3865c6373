"""
Unit Tests for the Schedule Expander
"""
from datetime import date, timedelta

import pytest

from oncoplan.core.clinical import (
    DosingUnit,
    DrugDetail,
    EventCategory,
    Modality,
    RegimenOption,
)
from oncoplan.core.plan import (
    SCHEDULE_HARD_CAP,
    DoseInputs,
    dosage_details,
    expand_regimen,
    expand_schedule,
)

START = date(2026, 3, 2)


@pytest.fixture
def inputs() -> DoseInputs:
    return DoseInputs(height_cm=165, weight_kg=60, age=50, serum_creatinine=70)


@pytest.fixture
def hp_regimen() -> RegimenOption:
    return RegimenOption(
        id="t_hp",
        name="HP",
        modality=Modality.TARGET,
        cycle="q3w",
        total_cycles=18,
        frequency_days=21,
        drugs=[
            DrugDetail(name="Trastuzumab", standard_dose=6, loading_dose=8, unit=DosingUnit.WEIGHT),
            DrugDetail(name="Pertuzumab", standard_dose=420, loading_dose=840, unit=DosingUnit.FIXED),
        ],
    )


def _regimen(option_id, modality, total, frequency, drugs=None, name="Regimen"):
    return RegimenOption(
        id=option_id,
        name=name,
        modality=modality,
        cycle="",
        total_cycles=total,
        frequency_days=frequency,
        drugs=drugs or [DrugDetail(name="Letrozole", standard_dose=2.5, unit=DosingUnit.FIXED)],
    )


class TestExpandRegimen:
    """Tests for single-regimen expansion."""

    def test_cycles_and_dates(self, hp_regimen, inputs):
        events = expand_regimen(hp_regimen, START, inputs)

        assert len(events) == 18
        assert [e.date for e in events] == [START + timedelta(days=21 * i) for i in range(18)]
        assert events[0].title == "HP (cycle 1)"
        assert events[-1].title == "HP (cycle 18)"
        assert all(e.category == EventCategory.TARGET for e in events)
        assert all(e.id is None and not e.completed for e in events)

    def test_loading_dose_only_in_first_cycle(self, hp_regimen, inputs):
        events = expand_regimen(hp_regimen, START, inputs)

        assert events[0].dosage_details == "Trastuzumab (loading) 480 mg + Pertuzumab (loading) 840 mg"
        assert events[1].dosage_details == "Trastuzumab 360 mg + Pertuzumab 420 mg"
        assert all("loading" not in e.dosage_details for e in events[1:])

    def test_hard_cap(self, inputs):
        events = expand_regimen(_regimen("e_x", Modality.ENDOCRINE, 5000, 1), START, inputs)

        assert len(events) == SCHEDULE_HARD_CAP
        assert events[-1].date == START + timedelta(days=SCHEDULE_HARD_CAP - 1)
        assert all(a.date <= b.date for a, b in zip(events, events[1:]))

    def test_daily_regimen_title_has_no_cycle_suffix(self, inputs):
        events = expand_regimen(_regimen("e_x", Modality.ENDOCRINE, 3, 1, name="Letrozole"), START, inputs)

        assert [e.title for e in events] == ["Letrozole"] * 3

    @pytest.mark.parametrize("frequency", [0, None])
    def test_no_frequency_is_single_event(self, inputs, frequency):
        events = expand_regimen(_regimen("x", Modality.CHEMO, 6, frequency), START, inputs)

        assert len(events) == 1
        assert events[0].date == START

    def test_missing_total_cycles_is_single_event(self, inputs):
        assert len(expand_regimen(_regimen("x", Modality.CHEMO, None, 21), START, inputs)) == 1

    def test_zero_total_cycles_yields_no_events(self, inputs):
        assert expand_regimen(_regimen("x", Modality.CHEMO, 0, 21), START, inputs) == []


class TestDosageDetails:
    """Tests for the per-event dose text."""

    def test_sentinel_text(self):
        regimen = _regimen("c", Modality.CHEMO, 6, 21, drugs=[
            DrugDetail(name="Carboplatin", standard_dose=6, unit=DosingUnit.AUC),
        ])

        text = dosage_details(regimen, DoseInputs(height_cm=165, weight_kg=60, age=50), is_initial=False)
        assert text == "Carboplatin 6 AUC (requires renal function)"

    def test_administration_suffix(self, inputs):
        regimen = _regimen("t", Modality.TARGET, 730, 1, drugs=[
            DrugDetail(name="Abemaciclib", standard_dose=150, unit=DosingUnit.FIXED, administration="bid"),
        ])

        assert dosage_details(regimen, inputs, is_initial=False) == "Abemaciclib 150 mg bid"

    def test_locked_snapshot_used(self, inputs):
        regimen = _regimen("c", Modality.CHEMO, 6, 21, drugs=[
            DrugDetail(name="Docetaxel", standard_dose=75, unit=DosingUnit.SURFACE_AREA, locked_dose="110 mg"),
        ])

        assert dosage_details(regimen, inputs, is_initial=False) == "Docetaxel 110 mg"

    def test_regimen_without_drugs(self, inputs):
        regimen = RegimenOption(id="x", name="Observation", modality=Modality.CHEMO, cycle="")

        assert dosage_details(regimen, inputs, is_initial=True) is None


class TestExpandSchedule:
    """Tests for multi-regimen merge and start-date fallback."""

    def test_merged_and_sorted(self, hp_regimen, inputs):
        chemo = _regimen("c", Modality.CHEMO, 6, 21)
        events = expand_schedule(
            [hp_regimen, chemo],
            {Modality.CHEMO: START, Modality.TARGET: START + timedelta(days=7)},
            today=date(2026, 1, 1),
            inputs=inputs,
        )

        assert len(events) == 24
        assert all(a.date <= b.date for a, b in zip(events, events[1:]))
        assert events[0].category == EventCategory.CHEMO

    def test_start_date_falls_back_to_chemo(self, hp_regimen, inputs):
        events = expand_schedule([hp_regimen], {Modality.CHEMO: START}, today=date(2026, 1, 1), inputs=inputs)

        assert events[0].date == START

    def test_start_date_falls_back_to_today(self, hp_regimen, inputs):
        today = date(2026, 1, 1)
        events = expand_schedule([hp_regimen], {}, today=today, inputs=inputs)

        assert events[0].date == today

    def test_empty(self, inputs):
        assert expand_schedule([], {}, today=START, inputs=inputs) == []
