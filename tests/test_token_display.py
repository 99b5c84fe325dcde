from __future__ import annotations

from pyplotfinder.tokens.display import EMPTY_VALUE, display_entries, format_value, label_for


def test_display_entries_omit_internal_keys_and_keep_order() -> None:
    entries = display_entries(
        {
            "id": 7,
            "deceased_name": "Juan Dela Cruz",
            "birth_date": "1950-01-02",
            "plot_id": "A-1",
            "lat": 15.49,
            "lng": 120.55,
            "section": "East",
            "is_veteran": True,
            "notes": "",
            "created_at": "2024-01-01T00:00:00Z",
        }
    )

    assert [entry.key for entry in entries] == ["deceased_name", "birth_date", "section", "is_veteran", "notes"]
    assert [entry.label for entry in entries] == ["Deceased Name", "Birth Date", "Section", "Is Veteran", "Notes"]
    assert [entry.value for entry in entries] == ["Juan Dela Cruz", "Jan 02, 1950", "East", "Yes", EMPTY_VALUE]


def test_display_entries_of_empty_payload() -> None:
    assert display_entries(None) == []
    assert display_entries({}) == []


def test_label_for_title_cases_unknown_keys() -> None:
    assert label_for("plot_section") == "Plot Section"
    assert label_for("death_date") == "Death Date"


def test_format_value_dates_and_coordinates() -> None:
    assert format_value("burial_date", "2001-07-08T00:00:00Z") == "Jul 08, 2001"
    assert format_value("burial_date", "sometime in spring") == "sometime in spring"
    assert format_value("lat", 15.5) == "15.500000"
    assert format_value("is_active", False) == "No"
    assert format_value("anything", None) == EMPTY_VALUE
