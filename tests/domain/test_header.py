from typedcsv.domain.header import map_header


def test_map_header_positions():
    header = map_header(["name", "age", "pet names"])

    assert header.position("name") == 0
    assert header.position("pet names") == 2
    assert header.position("missing") is None
    assert "age" in header
    assert header.width == 3
    assert len(header) == 3
    assert header.duplicates == ()


def test_map_header_last_duplicate_wins():
    header = map_header(["a", "b", "a", "a"])

    assert header.position("a") == 3
    assert header.duplicates == ("a",)
    assert header.width == 4
    assert len(header) == 2


def test_map_header_empty_row():
    header = map_header([])

    assert header.width == 0
    assert "" not in header
