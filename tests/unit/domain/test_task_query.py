"""Tests for the TaskQuery value object."""

from app.domain.value_objects.task_query import SortField, TaskQuery


def test_sort_field_parse():
    assert SortField.parse("createdAt") == SortField.CREATED_AT
    assert SortField.parse("created_at") == SortField.CREATED_AT
    assert SortField.parse("STATUS") == SortField.STATUS
    assert SortField.parse(None) == SortField.PRIORITY
    assert SortField.parse("title") == SortField.PRIORITY


def test_offset():
    assert TaskQuery(page=3, page_size=20).offset == 60


def test_search_term_blank_is_none():
    assert TaskQuery(search="   ").search_term is None
    assert TaskQuery(search=" HVAC ").search_term == "HVAC"


def test_search_id_only_for_integers():
    assert TaskQuery(search="42").search_id == 42
    assert TaskQuery(search="HVAC").search_id is None
    assert TaskQuery().search_id is None
