"""
Tests for processing extraction: bounded ID spans, quantities and dates.
"""

from __future__ import annotations

from backend_beantrace.extraction import ProcessingRecord, extract_processing


def test_full_processing_note():
    text = (
        "PROCESSING\n"
        "Reception IDs: R-001, R-002,\n"
        "  R-003\n"
        "Post-hull IDs: PH-9\n"
        "Size of beans: 16/18 screen\n"
        "Qty of green coffee (after hulling): 830,5 Kg\n"
        "Sort entry: 02/04/2023\n"
        "Sort exit: 05/04/2023\n"
        "Harvest begin: 01/03/2023\n"
        "Harvest end: 30/03/2023\n"
    )
    assert extract_processing(text) == ProcessingRecord(
        reception_ids="R-001, R-002, R-003",
        post_hull_ids="PH-9",
        size_of_beans="16/18 screen",
        qty_green_coffee="830,5 Kg",
        sort_entry="02/04/2023",
        sort_exit="05/04/2023",
        harvest_begin="01/03/2023",
        harvest_end="30/03/2023",
    )


def test_reception_ids_stop_at_section_boundary():
    text = "Reception IDs: R-1 R-2\nProcess IDs: P-1\n"
    record = extract_processing(text)
    assert record.reception_ids == "R-1 R-2"


def test_reception_ids_run_to_end_of_text():
    record = extract_processing("Reception IDs: A1, A2")
    assert record.reception_ids == "A1, A2"


def test_post_hull_label_variants():
    assert extract_processing("Post hull IDs: X1").post_hull_ids == "X1"
    assert extract_processing("Posthull IDs: X2").post_hull_ids == "X2"


def test_invalid_date_is_absent():
    assert extract_processing("Sort entry: 2023-04-02") is None


def test_no_processing_labels():
    assert extract_processing("PARENT COMPANY ID: 1\nRoast date: 01/01/2024") is None
