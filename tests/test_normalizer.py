"""
Tests for daily and event row normalization.
"""

import pytest

from src.ingestion.normalizer import (
    NormalizedRow,
    parse_rank,
    parse_score,
    parse_date,
    merge_identity,
    normalize_daily_rows,
    normalize_event_rows,
    group_by_month,
    group_events_by_month,
    collect_months,
)


def daily_record(date="2024-06-03", rank="1", player_id="p1", name="Alice", points="100", avatar="a.png"):
    return {
        "dailyDate": date,
        "rank": rank,
        "playerId": player_id,
        "name": name,
        "points": points,
        "avatarUrl": avatar,
    }


class TestParseRank:
    """Tests for parse_rank function."""

    def test_integer_strings(self):
        assert parse_rank("3") == 3
        assert parse_rank(" 12 ") == 12

    def test_numbers(self):
        assert parse_rank(7) == 7
        assert parse_rank(2.0) == 2

    @pytest.mark.parametrize("value", ["", "abc", "0", "-1", "2.5", "inf", "nan", None, True])
    def test_rejects_invalid(self, value):
        assert parse_rank(value) is None


class TestParseScore:
    """Tests for parse_score function."""

    def test_thousands_separator(self):
        assert parse_score("1,234") == 1234

    def test_integral_values_stay_int(self):
        assert isinstance(parse_score("50"), int)
        assert isinstance(parse_score(50.0), int)

    def test_fractional(self):
        assert parse_score("12.5") == 12.5

    @pytest.mark.parametrize("value", ["", "   ", "n/a", None, float("nan"), float("inf")])
    def test_unparseable_is_none(self, value):
        assert parse_score(value) is None


class TestParseDate:
    """Tests for parse_date function."""

    def test_valid(self):
        assert parse_date("2024-06-03") == "2024-06-03"

    @pytest.mark.parametrize("value", ["", "2024-6-3", "2024-02-30", "03/06/2024", None, 20240603])
    def test_invalid(self, value):
        assert parse_date(value) is None


class TestMergeIdentity:
    """Tests for the first-known-value-wins merge rule."""

    def test_replaces_unknown_name(self):
        entry = {"name": "Unknown", "avatar": ""}
        merge_identity(entry, "Alice", "a.png")
        assert entry == {"name": "Alice", "avatar": "a.png"}

    def test_keeps_first_real_name(self):
        entry = {"name": "Alice", "avatar": "a.png"}
        merge_identity(entry, "Alicia", "b.png")
        assert entry == {"name": "Alice", "avatar": "a.png"}

    def test_unknown_never_overwrites(self):
        entry = {"name": "Alice", "avatar": ""}
        merge_identity(entry, "Unknown", "")
        assert entry == {"name": "Alice", "avatar": ""}


class TestNormalizeDailyRows:
    """Tests for normalize_daily_rows function."""

    def test_basic_row(self):
        rows = normalize_daily_rows([daily_record()])

        assert rows == [NormalizedRow(
            date="2024-06-03",
            month="2024-06",
            rank=1,
            player_id="p1",
            name="Alice",
            avatar="a.png",
            score=100,
            sequence_index=0,
        )]
        assert rows[0].event_id is None

    def test_drops_malformed_rows(self):
        records = [
            daily_record(rank="0"),
            daily_record(rank="abc"),
            daily_record(rank=""),
            daily_record(date="2024-6-3"),
            daily_record(date="2024-02-30"),
            daily_record(date=""),
            daily_record(rank="4"),
        ]
        rows = normalize_daily_rows(records)

        assert len(rows) == 1
        assert rows[0].rank == 4
        assert rows[0].sequence_index == 6

    def test_missing_identity_defaults(self):
        rows = normalize_daily_rows([
            daily_record(player_id="", name="Bob"),
            daily_record(player_id="", name="", rank="2"),
        ])

        assert rows[0].player_id == "name:Bob"
        assert rows[1].player_id == "name:Unknown"
        assert rows[1].name == "Unknown"

    def test_same_name_without_id_collides(self):
        rows = normalize_daily_rows([
            daily_record(player_id="", name="Bob", rank="1"),
            daily_record(player_id="", name="Bob", rank="2", date="2024-06-04"),
        ])
        assert {row.player_id for row in rows} == {"name:Bob"}

    def test_identity_whitespace_trimmed(self):
        rows = normalize_daily_rows([
            daily_record(player_id=" p1 ", name="  Alice "),
            daily_record(player_id="", name="Bob ", rank="2"),
            daily_record(player_id="", name="Bob", rank="3"),
            daily_record(player_id="", name="   ", rank="4"),
        ])

        assert rows[0].player_id == "p1"
        assert rows[0].name == "Alice"
        assert rows[1].player_id == rows[2].player_id == "name:Bob"
        assert rows[3].name == "Unknown"

    def test_missing_avatar_is_kept(self):
        rows = normalize_daily_rows([daily_record(avatar="")])
        assert len(rows) == 1
        assert rows[0].avatar == ""

    def test_score_column_preferred_over_points(self):
        record = daily_record(points="5")
        record["score"] = "1,500"
        assert normalize_daily_rows([record])[0].score == 1500

    def test_unparseable_score_is_none(self):
        assert normalize_daily_rows([daily_record(points="")])[0].score is None

    def test_sorted_by_date_rank_sequence(self):
        records = [
            daily_record(date="2024-06-04", rank="1", player_id="a"),
            daily_record(date="2024-06-03", rank="2", player_id="b"),
            daily_record(date="2024-06-03", rank="1", player_id="c"),
            daily_record(date="2024-06-03", rank="1", player_id="d"),
        ]
        rows = normalize_daily_rows(records)

        assert [row.player_id for row in rows] == ["c", "d", "b", "a"]
        assert [row.sequence_index for row in rows] == [2, 3, 1, 0]

    def test_accepts_date_key(self):
        rows = normalize_daily_rows([{"date": "2024-06-03", "rank": 1, "playerId": "p1", "score": 10}])
        assert rows[0].date == "2024-06-03"
        assert rows[0].score == 10


class TestNormalizeEventRows:
    """Tests for normalize_event_rows function."""

    def test_sequence_index_and_event_id(self):
        events = [
            {"name": "Spring Fling", "date": "2024-06-10", "rankings": [
                {"rank": 1, "name": "A", "playerId": "a", "points": "1,200", "avatar": "a.png"},
            ]},
            {"name": "Café Cup", "date": "2024-06-12", "rankings": [
                {"rank": 1, "name": "B", "playerId": "b", "points": 900},
                {"rank": 2, "name": "C", "playerId": "c", "points": 800},
                {"rank": 3, "name": "D", "playerId": "d", "points": 700},
            ]},
        ]
        rows = normalize_event_rows(events)

        assert [row.sequence_index for row in rows] == [0, 1000, 1001, 1002]
        assert rows[0].event_id == "spring-fling-2024-06-10"
        assert rows[0].score == 1200
        assert rows[0].avatar == "a.png"
        assert rows[3].event_id == "cafe-cup-2024-06-12"
        assert rows[3].month == "2024-06"

    def test_skips_events_without_valid_date(self):
        events = [
            {"name": "No Date", "rankings": [{"rank": 1, "playerId": "a"}]},
            {"name": "Short", "date": "2024-6-1", "rankings": [{"rank": 1, "playerId": "a"}]},
        ]
        assert normalize_event_rows(events) == []

    def test_drops_all_arenas_and_bad_ranks(self):
        events = [{"name": "E", "date": "2024-06-10", "rankings": [
            {"rank": "", "name": "All arenas"},
            {"rank": 0, "name": "All arenas"},
            {"rank": "x", "name": "Bad"},
            "not a dict",
            {"rank": 5, "name": "Eve"},
        ]}]
        rows = normalize_event_rows(events)

        assert len(rows) == 1
        assert rows[0].player_id == "name:Eve"
        assert rows[0].sequence_index == 4

    def test_missing_rankings(self):
        assert normalize_event_rows([{"name": "E", "date": "2024-06-10", "rankings": None}]) == []

    def test_unnamed_event(self):
        rows = normalize_event_rows([{"date": "2024-06-10", "rankings": [{"rank": 1, "playerId": "a"}]}])
        assert rows[0].event_id == "unknown-2024-06-10"


class TestGrouping:
    """Tests for month grouping helpers."""

    def test_group_by_month(self):
        rows = normalize_daily_rows([
            daily_record(date="2024-05-31"),
            daily_record(date="2024-06-01"),
            daily_record(date="2024-06-02"),
        ])
        grouped = group_by_month(rows)

        assert sorted(grouped) == ["2024-05", "2024-06"]
        assert [row.date for row in grouped["2024-06"]] == ["2024-06-01", "2024-06-02"]

    def test_collect_months(self):
        daily = normalize_daily_rows([daily_record(date="2024-06-01")])
        events = normalize_event_rows([{"name": "E", "date": "2024-04-20", "rankings": [{"rank": 1}]}])
        assert collect_months(daily, events) == ["2024-04", "2024-06"]

    def test_group_events_by_month(self):
        events = [
            {"name": "A", "date": "2024-05-30"},
            {"name": "B", "date": "2024-06-02"},
            {"name": "C", "date": "bad"},
        ]
        grouped = group_events_by_month(events)
        assert {month: [e["name"] for e in evts] for month, evts in grouped.items()} == {
            "2024-05": ["A"],
            "2024-06": ["B"],
        }
