"""Tests for normalization, consistency checking, line selection and aggregation."""

import math

import pandas as pd
import pytest

from conftest import make_frame, word_rows
from hb_breaks_errors import ConsistencyViolationError, MalformedRowError, UnknownWorkError
from hb_breaks_pipeline import (
    aggregate_breaks,
    check_consistency,
    find_inconsistent_lines,
    join_catalog,
    normalize_rows,
    read_rows,
    run_pipeline,
    select_caesura_rows,
    WorkAggregate,
)


class TestNormalizeRows:

    def test_booleans_and_integers(self, raw_rows):
        df = normalize_rows(raw_rows)
        assert df["breaks_hb_schein"].dtype == bool
        assert df["is_speech"].dtype == bool
        assert df["enclitic"].dtype == bool
        assert df["word_n"].tolist()[:4] == [1, 2, 3, 4]
        first = df.iloc[0]
        assert bool(first["breaks_hb_schein"])
        assert bool(first["is_speech"])
        assert not bool(first["enclitic"])
        assert bool(df.iloc[2]["enclitic"])

    def test_book_key(self, raw_rows):
        df = normalize_rows(raw_rows)
        assert set(df["book_key"]) == {"Il.1", "Od.1", "Od.2", "Sh."}

    def test_line_numbers_stay_text(self, raw_rows):
        df = normalize_rows(raw_rows)
        assert "2a" in set(df["line_n"])

    def test_input_not_modified(self, raw_rows):
        before = raw_rows.copy()
        normalize_rows(raw_rows)
        pd.testing.assert_frame_equal(raw_rows, before)

    @pytest.mark.parametrize("col,value", [
        ("breaks_hb_schein", "yes"),
        ("is_speech", "Maybe"),
        ("enclitic", "Proclitic"),
    ])
    def test_unrecognized_categorical(self, raw_rows, col, value):
        raw_rows.loc[5, col] = value
        with pytest.raises(MalformedRowError) as exc:
            normalize_rows(raw_rows)
        err = exc.value
        assert err.field_name == col
        assert err.value == value
        assert err.row_number == 7
        assert (err.work, err.book_n, err.line_n) == ("Il.", "1", "2")

    def test_counts_every_bad_record(self, raw_rows):
        raw_rows.loc[[0, 1, 2], "enclitic"] = "?"
        with pytest.raises(MalformedRowError) as exc:
            normalize_rows(raw_rows)
        assert exc.value.n_bad == 3
        assert exc.value.row_number == 2

    def test_bad_word_position(self, raw_rows):
        raw_rows.loc[0, "word_n"] = "first"
        with pytest.raises(MalformedRowError) as exc:
            normalize_rows(raw_rows)
        assert exc.value.field_name == "word_n"

    @pytest.mark.parametrize("value", ["inf", "-inf", "1e30", "3.5", "99999999999"])
    def test_non_integer_word_position(self, raw_rows, value):
        raw_rows.loc[3, "caesura_word_n"] = value
        with pytest.raises(MalformedRowError) as exc:
            normalize_rows(raw_rows)
        assert exc.value.field_name == "caesura_word_n"
        assert exc.value.value == value
        assert exc.value.row_number == 5

    def test_signed_and_padded_word_positions(self, raw_rows):
        raw_rows.loc[0, "word_n"] = " +1 "
        df = normalize_rows(raw_rows)
        assert df["word_n"].iloc[0] == 1

    def test_missing_column(self, raw_rows):
        with pytest.raises(MalformedRowError, match="speaker"):
            normalize_rows(raw_rows.drop(columns=["speaker"]))

    def test_missing_column_message(self, raw_rows):
        with pytest.raises(MalformedRowError) as exc:
            normalize_rows(raw_rows.drop(columns=["speaker", "enclitic"]))
        err = exc.value
        assert str(err) == "input is missing required column(s): speaker, enclitic"
        assert err.field_name == "columns"
        assert err.row_number is None
        assert "work=" not in str(err)

    def test_unknown_work_passes_normalization(self):
        df = normalize_rows(make_frame(word_rows("Unknown.", "1", "1", 2, 1, True)))
        assert set(df["work"]) == {"Unknown."}


class TestConsistency:

    def test_clean_data_passes(self, raw_rows):
        df = normalize_rows(raw_rows)
        assert find_inconsistent_lines(df) == []
        assert check_consistency(df) is df

    def test_differing_speaker(self, raw_rows):
        raw_rows.loc[0, "speaker"] = "Hector"
        df = normalize_rows(raw_rows)
        with pytest.raises(ConsistencyViolationError) as exc:
            check_consistency(df)
        violations = exc.value.violations
        assert len(violations) == 1
        v = violations[0]
        assert v.key == ("Il.", "Il.1", "1")
        assert v.bad_fields() == ["speaker"]
        assert v.n_distinct["speaker"] == 2
        assert "Il." in str(exc.value)

    def test_collects_all_violations(self, raw_rows):
        raw_rows.loc[0, "speaker"] = "Hector"
        od = raw_rows.index[(raw_rows["work"] == "Od.") & (raw_rows["book_n"] == "2")]
        raw_rows.loc[od[0], "caesura_word_n"] = "3"
        raw_rows.loc[od[1], "breaks_hb_schein"] = "Yes"
        df = normalize_rows(raw_rows)
        with pytest.raises(ConsistencyViolationError) as exc:
            check_consistency(df)
        keys = {v.key for v in exc.value.violations}
        assert keys == {("Il.", "Il.1", "1"), ("Od.", "Od.2", "5")}
        od_v = [v for v in exc.value.violations if v.work == "Od."][0]
        assert od_v.bad_fields() == ["caesura_word_n", "breaks_hb_schein"]

    def test_same_line_number_in_different_books_is_not_a_conflict(self):
        rows = word_rows("Od.", "1", "5", 2, 1, True, speaker="A") + word_rows("Od.", "2", "5", 2, 1, False, speaker="B")
        df = normalize_rows(make_frame(rows))
        assert find_inconsistent_lines(df) == []

    def test_passing_groups_have_one_value_per_field(self, raw_rows):
        df = check_consistency(normalize_rows(raw_rows))
        fields = ["caesura_word_n", "breaks_hb_schein", "speaker", "is_speech"]
        counts = df.groupby(["work", "book_key", "line_n"])[fields].nunique()
        assert (counts == 1).all().all()


class TestSelectAndAggregate:

    def test_one_row_per_line(self, raw_rows):
        rep = select_caesura_rows(normalize_rows(raw_rows))
        assert len(rep) == 6
        assert not rep.duplicated(["work", "book_key", "line_n"]).any()
        assert (rep["word_n"] == rep["caesura_word_n"]).all()

    def test_line_without_caesura_word_is_dropped(self):
        rows = word_rows("Il.", "1", "1", 3, 2, True) + word_rows("Il.", "1", "2", 3, 7, True)
        rep = select_caesura_rows(normalize_rows(make_frame(rows)))
        assert rep["line_n"].tolist() == ["1"]

    def test_counts(self, raw_rows):
        rep = select_caesura_rows(normalize_rows(raw_rows))
        counts = aggregate_breaks(rep).set_index("work")
        assert counts.loc["Il.", "num_breaks"] == 2
        assert counts.loc["Il.", "num_caesurae"] == 3
        assert counts.loc["Od.", "num_breaks"] == 1
        assert counts.loc["Od.", "num_caesurae"] == 2
        assert counts.loc["Sh.", "num_breaks"] == 0
        assert counts.loc["Sh.", "num_caesurae"] == 1
        assert (counts["num_breaks"] <= counts["num_caesurae"]).all()

    def test_empty_input(self):
        counts = aggregate_breaks(select_caesura_rows(normalize_rows(make_frame([]))))
        assert len(counts) == 0
        assert list(counts.columns) == ["work", "num_breaks", "num_caesurae"]


class TestJoinCatalog:

    def test_join(self, raw_rows, works):
        rep = select_caesura_rows(normalize_rows(raw_rows))
        aggs = {a.work: a for a in join_catalog(aggregate_breaks(rep), works)}
        assert aggs["Il."] == WorkAggregate("Il.", 2, 3, 20, -750, "Iliad")
        assert aggs["Sh."].num_lines == 479

    def test_unknown_work(self, raw_rows, works):
        raw_rows = pd.concat([raw_rows, make_frame(word_rows("Unknown.", "1", "1", 2, 1, True))], ignore_index=True)
        rep = select_caesura_rows(normalize_rows(raw_rows))
        counts = aggregate_breaks(rep)
        with pytest.raises(UnknownWorkError) as exc:
            join_catalog(counts, works)
        assert exc.value.works == ["Unknown."]


class TestWorkAggregate:

    def test_rates(self):
        a = WorkAggregate("X", num_breaks=25, num_caesurae=100, num_lines=500, date=0, work_name="X")
        assert a.caesura_rate == pytest.approx(0.20)
        assert a.break_per_caesura_rate == pytest.approx(0.25)
        assert a.break_per_line_rate == pytest.approx(0.05)

    def test_zero_caesurae_is_nan(self):
        a = WorkAggregate("X", 0, 0, 100, 0, "X")
        assert math.isnan(a.break_per_caesura_rate)
        assert a.break_per_line_rate == 0


class TestRunPipeline:

    def test_end_to_end(self, raw_rows, works):
        result = run_pipeline(raw_rows, works)
        assert len(result.rows) == len(raw_rows)
        assert len(result.representative) == 6
        assert set(result.by_work()) == {"Il.", "Od.", "Sh."}

    def test_unknown_work_fails_at_join(self, raw_rows, works, monkeypatch):
        import hb_breaks_pipeline

        reached = []
        original = hb_breaks_pipeline.join_catalog

        def spy(counts, catalog):
            reached.append(True)
            return original(counts, catalog)

        monkeypatch.setattr(hb_breaks_pipeline, "join_catalog", spy)
        raw_rows = pd.concat([raw_rows, make_frame(word_rows("Unknown.", "1", "1", 2, 1, True))], ignore_index=True)
        with pytest.raises(UnknownWorkError):
            hb_breaks_pipeline.run_pipeline(raw_rows, works)
        assert reached == [True]

    def test_read_rows_keeps_text(self, tmp_path, raw_rows):
        path = tmp_path / "in.csv"
        raw_rows.to_csv(path, index=False, encoding="utf-8-sig")
        df = read_rows(path)
        assert df.loc[df["work"] == "Sh.", "book_n"].iloc[0] == ""
        assert "2a" in set(df["line_n"])
        assert pd.api.types.is_string_dtype(df["word_n"])
        assert df["word_n"].iloc[0] == "1"

    def test_read_rows_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_rows(tmp_path / "nope.csv")
