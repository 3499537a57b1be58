"""Shared fixtures for the break analysis tests."""

import pandas as pd
import pytest

from hb_breaks_catalogs import PeriodCatalog, WorkCatalog
from hb_breaks_pipeline import REQUIRED_COLUMNS


def word_rows(work, book_n, line_n, n_words, caesura, brk, speaker="", speech="No", enclitic_at=()):
    """Word rows for one line of verse; every word repeats the line-level fields."""
    return [
        {
            "work": work,
            "book_n": book_n,
            "line_n": line_n,
            "word_n": str(i),
            "caesura_word_n": str(caesura),
            "breaks_hb_schein": "Yes" if brk else "No",
            "speaker": speaker,
            "is_speech": speech,
            "enclitic": "Enclitic" if i in enclitic_at else "Non-enclitic",
        }
        for i in range(1, n_words + 1)
    ]


def make_frame(rows):
    return pd.DataFrame(rows, columns=REQUIRED_COLUMNS)


@pytest.fixture
def works():
    return WorkCatalog.from_records([
        ("Il.", 20, -750, "Iliad"),
        ("Od.", 10, -750, "Odyssey"),
        ("Sh.", 479, -550, "Shield"),
    ])


@pytest.fixture
def periods():
    return PeriodCatalog.from_records([(-800, -500, "Archaic"), (-100, 500, "Imperial")])


@pytest.fixture
def raw_rows():
    """
    Il.: 3 lines, 2 with breaks (one has an enclitic), 1 spoken
    Od.: 2 lines (books 1 and 2 share line_n "5"), 1 break
    Sh.: 1 line, no break
    """
    rows = []
    rows += word_rows("Il.", "1", "1", 4, 2, True, speaker="Achilles", speech="Yes", enclitic_at=(3,))
    rows += word_rows("Il.", "1", "2", 3, 3, True)
    rows += word_rows("Il.", "1", "2a", 5, 1, False)
    rows += word_rows("Od.", "1", "5", 3, 2, True)
    rows += word_rows("Od.", "2", "5", 3, 2, False)
    rows += word_rows("Sh.", "", "10", 4, 4, False)
    return make_frame(rows)
