"""Tests for page iteration."""

from unittest.mock import Mock

import pytest

from gitlab_to_azdo_migrator.pagination import Page, iter_pages


@pytest.mark.unit
class TestIterPages:
    def test_stops_when_next_page_not_beyond_current(self) -> None:
        fetch = Mock(return_value=Page(items=[1, 2], current_page=1, next_page=1))
        assert list(iter_pages(fetch)) == [1, 2]
        fetch.assert_called_once_with(1)

    def test_stops_on_last_page_marker(self) -> None:
        fetch = Mock(return_value=Page(items=["a"], current_page=1, next_page=0))
        assert list(iter_pages(fetch)) == ["a"]
        assert fetch.call_count == 1

    def test_follows_next_page(self) -> None:
        pages = {
            1: Page(items=[1, 2], current_page=1, next_page=2),
            2: Page(items=[3, 4], current_page=2, next_page=3),
            3: Page(items=[5], current_page=3, next_page=0),
        }
        fetch = Mock(side_effect=pages.__getitem__)
        assert list(iter_pages(fetch)) == [1, 2, 3, 4, 5]
        assert [c.args[0] for c in fetch.call_args_list] == [1, 2, 3]

    def test_empty_first_page(self) -> None:
        fetch = Mock(return_value=Page(items=[], current_page=1, next_page=0))
        assert list(iter_pages(fetch)) == []

    def test_errors_propagate(self) -> None:
        fetch = Mock(side_effect=RuntimeError("boom"))
        with pytest.raises(RuntimeError, match="boom"):
            list(iter_pages(fetch))
