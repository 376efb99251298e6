import pytest

from crm.services import list_utils


def test_chunked_splits_in_order():
    assert list(list_utils.chunked(["a", "b", "c", "d", "e"], 2)) == [["a", "b"], ["c", "d"], ["e"]]
    assert list(list_utils.chunked([], 50)) == []


def test_chunked_rejects_non_positive_size():
    with pytest.raises(ValueError):
        list(list_utils.chunked([1], 0))


def test_page_range_is_inclusive():
    assert list_utils.page_range(1, 50) == (0, 49)
    assert list_utils.page_range(3, 10) == (20, 29)
    assert list_utils.page_range(0, 10) == (0, 9)


def test_rows_to_csv_quotes_data_but_not_header():
    rows = [{"code": "A1", "name": 'Big "Box"'}, {"code": "B2", "name": None}]
    text = list_utils.rows_to_csv(rows, ["Code", "Name"], lambda r: [r["code"], r["name"]], quote_all=True)
    assert text.splitlines() == ["Code,Name", '"A1","Big ""Box"""', '"B2",""']
    assert not text.endswith("\n")


def test_rows_to_csv_with_bom():
    text = list_utils.rows_to_csv([], ["Code"], lambda r: [], bom=True)
    assert text == list_utils.UTF8_BOM + "Code"


def test_csv_response():
    content = list_utils.rows_to_csv([{"name": "Apple"}], ["Name"], lambda i: [i["name"]])
    response = list_utils.csv_response(content, "items.csv")
    lines = response.content.decode().strip().splitlines()
    assert lines == ["Name", "Apple"]
    assert response["Content-Disposition"] == 'attachment; filename="items.csv"'
