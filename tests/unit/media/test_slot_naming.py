import pytest

from image_service.media.slot_naming import (
    aggregate_name_for,
    extension_of,
    is_metadata_key,
    is_safe_id,
    logo_metadata_name_for,
    logo_name_for,
    matches_stem,
    slot_name_for,
)


def test_slot_name_is_deterministic() -> None:
    assert slot_name_for("E1", 0, ".png") == "E1-0.png"
    assert slot_name_for("E1", 0, ".png") == slot_name_for("E1", 0, ".png")
    assert slot_name_for("E1", 3, "") == "E1-3"


def test_logo_and_document_names() -> None:
    assert logo_name_for("C1", ".jpg") == "logo-C1.jpg"
    assert aggregate_name_for("E1") == "E1.json"
    assert logo_metadata_name_for("C1") == "logo-C1.json"


@pytest.mark.parametrize(
    ("original", "expected"),
    [
        ("a.png", ".png"),
        ("photo.JPG", ".JPG"),
        ("archive.tar.gz", ".gz"),
        ("C:\\Users\\me\\shot.webp", ".webp"),
        ("noext", ""),
        ("", ""),
        (None, ""),
        ("data.json", ""),
        ("weird.p$g", ""),
    ],
)
def test_extension_of(original, expected) -> None:
    assert extension_of(original) == expected


def test_matches_stem_requires_exact_stem() -> None:
    assert matches_stem("E1-1.png", "E1-1")
    assert matches_stem("E1-1", "E1-1")
    assert not matches_stem("E1-10.png", "E1-1")
    assert not matches_stem("logo-C10.png", "logo-C1")


def test_matches_stem_rejects_dotted_neighbours() -> None:
    assert not matches_stem("logo-acme.co.png", "logo-acme")
    assert not matches_stem("E1-0.v2-0.png", "E1-0")
    assert not matches_stem("E1-0.png.bak", "E1-0")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("E1", True),
        ("my_entity-42", True),
        ("acme.co", False),
        (".hidden", False),
        ("../x", False),
        ("-lead", False),
        ("E1\n", False),
        ("", False),
        (None, False),
    ],
)
def test_is_safe_id(value, expected) -> None:
    assert is_safe_id(value) is expected


def test_metadata_keys_are_recognised() -> None:
    assert is_metadata_key("E1.json")
    assert is_metadata_key("logo-C1.JSON")
    assert not is_metadata_key("E1-0.png")
