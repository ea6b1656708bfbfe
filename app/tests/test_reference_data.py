import logging
import pytest

from app.models.age import AgeBracket
from app.models.trip_type import TripType
from app.services.reference_data import (
    Bracket,
    BracketTable,
    check_bracket_tables,
    load_reference_data,
)
from app.tests.factories import BASE_MULTIPLIER, make_destination, make_reference


class TestBracketTable:

    @pytest.fixture
    def ages(self):
        return BracketTable([Bracket(65, 84, 3.0), Bracket(1, 17, 0.5), Bracket(18, 64, 1.0)])

    @pytest.mark.parametrize("value,multiplier", [
        (1, 0.5), (17, 0.5), (18, 1.0), (40, 1.0), (64, 1.0), (65, 3.0), (84, 3.0),
    ])
    def test_find_within_inclusive_bounds(self, ages, value, multiplier):
        assert ages.find(value).multiplier == multiplier

    @pytest.mark.parametrize("value", [0, -1, 85, 200])
    def test_find_outside_every_bracket(self, ages, value):
        assert ages.find(value) is None

    def test_find_in_gap(self):
        table = BracketTable([Bracket(1, 10, 1.0), Bracket(20, 30, 2.0)])

        assert table.find(15) is None
        assert table.find(20).multiplier == 2.0

    def test_empty_table(self):
        assert BracketTable([]).find(5) is None

    def test_sound_table_has_no_issues(self, ages):
        assert ages.coverage_issues(1, 84) == []

    def test_reports_gap(self):
        table = BracketTable([Bracket(1, 10, 1.0), Bracket(15, 84, 1.0)])

        assert table.coverage_issues(1, 84) == ["gap: 11-14 not covered"]

    def test_reports_overlap(self):
        table = BracketTable([Bracket(1, 20, 1.0), Bracket(18, 84, 1.0)])

        assert table.coverage_issues(1, 84) == ["overlap: 18-20 matched twice"]

    def test_reports_uncovered_ends(self):
        table = BracketTable([Bracket(5, 60, 1.0)])

        assert table.coverage_issues(1, 84) == [
            "gap: 1-4 not covered",
            "gap: 61-84 not covered",
        ]

    def test_reports_empty_table(self):
        assert BracketTable([]).coverage_issues(1, 84) == ["no brackets cover 1-84"]


class TestReferenceData:

    def test_check_bracket_tables_on_sound_data(self, reference_data):
        assert check_bracket_tables(reference_data) == []

    def test_check_bracket_tables_names_the_table(self):
        reference = make_reference(age_brackets=[Bracket(1, 70, 1.0)], duration_brackets=[Bracket(1, 365, 1.0)])

        assert check_bracket_tables(reference) == [
            "age brackets gap: 71-84 not covered",
            "duration brackets gap: 366-731 not covered",
        ]

    def test_lookups_accept_string_ids(self, reference_data):
        assert reference_data.trip_type("1").id == 1
        assert reference_data.excess(" 1 ").id == 1
        assert reference_data.cover("1").id == 1
        assert reference_data.trip_type("x") is None
        assert reference_data.excess(None) is None

    def test_destinations_by_zone_skips_unknown_ids(self):
        reference = make_reference(destinations=[
            make_destination(id=1, zone=1),
            make_destination(id=2, zone=2),
        ])

        assert [d.id for d in reference.destinations_by_zone([1, 2, 42])] == [2, 1]

    def test_form_options_orders_destinations_by_label(self):
        reference = make_reference(destinations=[
            make_destination(id=1, label="Worldwide"),
            make_destination(id=2, label="Europe"),
            make_destination(id=3, label="Australia"),
        ])

        labels = [d.label for d in reference.form_options()["destinations"]]
        assert labels == ["Australia", "Europe", "Worldwide"]


@pytest.mark.integration
class TestLoadReferenceData:

    async def test_loads_snapshot(self, db_session, seeded_reference):
        reference = await load_reference_data(db_session)

        assert reference.base_multiplier == BASE_MULTIPLIER
        assert [c.id for c in reference.covers] == [1, 2]
        assert reference.trip_type(2).multiplier == 2.5
        assert reference.destinations[3].ski_per_day_amount is None
        assert reference.age_bracket(30).multiplier == 1.0
        assert reference.duration_bracket(731).multiplier == 1.0

    async def test_without_base_premium(self, db_session):
        reference = await load_reference_data(db_session)

        assert reference.base_multiplier is None
        assert reference.covers == []

    async def test_logs_bracket_gaps(self, db_session, seeded_reference, caplog):
        db_session.add(AgeBracket(age_minimum=90, age_maximum=99, multiplier=1.0))
        await db_session.commit()

        with caplog.at_level(logging.WARNING, logger="app.services.reference_data"):
            await load_reference_data(db_session)

        assert "Reference data: age brackets gap: 85-89 not covered" in caplog.text

    async def test_reads_current_rates_on_each_call(self, db_session, seeded_reference):
        first = await load_reference_data(db_session)
        trip_type = first.trip_type(1)
        assert trip_type.multiplier == 1.0

        row = await db_session.get(TripType, 1)
        row.multiplier = 1.75
        await db_session.commit()

        second = await load_reference_data(db_session)
        assert second.trip_type(1).multiplier == 1.75
