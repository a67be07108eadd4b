"""
Tests for iteration via iterators and cursors.
"""

from pytest import raises

from typedmap import EntryCursor, MutationDuringIterationError, TypedMapping


def _create_mapping() -> TypedMapping[str, int]:
    return TypedMapping(str, int, entries=[("a", 1), ("b", 2), ("c", 3)])


def test_entries():
    """
    Test iterating over key/value pairs in storage order.
    """
    mapping = _create_mapping()

    assert list(mapping.entries()) == [("a", 1), ("b", 2), ("c", 3)]
    assert list(mapping) == ["a", "b", "c"]

    # iteration is restartable
    assert list(mapping.entries()) == list(mapping.entries())

    assert list(TypedMapping(str, int).entries()) == []


def test_entries_fail_fast():
    """
    Test that structural modification during iteration raises.
    """
    mapping = _create_mapping()

    with raises(MutationDuringIterationError, match="changed size during iteration"):
        for key in mapping:
            if key == "a":
                mapping.remove("b")

    mapping = _create_mapping()
    with raises(MutationDuringIterationError):
        for key, _ in mapping.entries():
            mapping.put(key + key, 0)

    assert isinstance(MutationDuringIterationError(), RuntimeError)


def test_entries_overwrite():
    """
    Test that overwriting values during iteration is allowed.
    """
    mapping = _create_mapping()

    for key, value in mapping.entries():
        mapping.put(key, value * 10)

    assert mapping.value_list() == (10, 20, 30)


def test_cursor():
    """
    Test the explicit cursor protocol.
    """
    mapping = _create_mapping()
    cursor = mapping.cursor()

    assert isinstance(cursor, EntryCursor)

    visited: list[tuple[str, int, int]] = []
    cursor.rewind()
    while cursor.valid():
        visited.append((cursor.key(), cursor.current(), cursor.position))
        cursor.advance()

    assert visited == [("a", 1, 0), ("b", 2, 1), ("c", 3, 2)]
    assert not cursor.valid()

    with raises(IndexError, match="past the last entry"):
        cursor.current()

    with raises(IndexError):
        cursor.key()

    cursor.rewind()
    assert cursor.position == 0
    assert cursor.current() == 1


def test_cursor_key_object():
    """
    Test that the cursor exposes the stored key object rather than its position.
    """
    key = ["unhashable"]
    mapping = TypedMapping(list, str)
    mapping.put(key, "value")

    cursor = mapping.cursor()
    assert cursor.key() is key


def test_cursor_iterator():
    mapping = _create_mapping()
    cursor = mapping.cursor()

    assert list(cursor) == [("a", 1), ("b", 2), ("c", 3)]
    assert list(cursor) == []

    cursor.rewind()
    assert next(cursor) == ("a", 1)


def test_independent_cursors():
    mapping = _create_mapping()
    cursor1, cursor2 = mapping.cursor(), mapping.cursor()

    cursor1.advance()
    cursor1.advance()

    assert cursor1.current() == 3
    assert cursor2.current() == 1


def test_cursor_fail_fast():
    """
    Test that a cursor raises after the mapping is modified, until rewound.
    """
    mapping = _create_mapping()
    cursor = mapping.cursor()
    cursor.advance()

    mapping.remove("a")

    with raises(MutationDuringIterationError):
        cursor.current()
    with raises(MutationDuringIterationError):
        cursor.valid()
    with raises(MutationDuringIterationError):
        cursor.advance()

    cursor.rewind()
    assert list(cursor) == [("b", 2), ("c", 3)]
