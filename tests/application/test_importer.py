import pytest

from flashdeck.application.importer import import_cards, load_import_file
from flashdeck.domain.errors import InvalidRequest


@pytest.fixture
def deck_file(tmp_path):
    path = tmp_path / "spanish.yaml"
    path.write_text(
        """
collection: Spanish
description: Core vocabulary
cards:
  - front: hola
    back: hello
    id: vocab-001
  - front: adiós
    back: goodbye
    id: vocab-002
  - front: gracias
    back: thanks
""",
        encoding="utf-8",
    )
    return path


def test_import_creates_collection_and_cards(services, deck_file, t0):
    result = import_cards(deck_file, services.cards, services.collections, t0)

    collection = services.collections.find_by_name("Spanish")
    assert collection is not None
    assert collection.description == "Core vocabulary"
    assert result.collection_id == collection.id
    assert result.created == 3
    assert result.skipped == 0
    assert result.errors == []

    cards = services.cards.list_cards(t0, collection_id=collection.id)
    assert sorted(c.front for c in cards) == ["adiós", "gracias", "hola"]
    assert {c.note_id for c in cards} == {"vocab-001", "vocab-002", None}


def test_reimport_skips_known_notes(services, deck_file, t0):
    import_cards(deck_file, services.cards, services.collections, t0)
    result = import_cards(deck_file, services.cards, services.collections, t0)

    # Cards without an id cannot be matched and are added again
    assert result.created == 1
    assert result.skipped == 2
    assert len(services.collections.list_collections()) == 1


def test_import_into_existing_collection(services, deck_file, t0):
    existing = services.collections.create_collection("Spanish", t0)
    result = import_cards(deck_file, services.cards, services.collections, t0)
    assert result.collection_id == existing.id


def test_import_reports_incomplete_cards(services, tmp_path, t0):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "collection: Misc\ncards:\n  - front: only front\n  - just a string\n  - front: q\n    back: a\n"
    )

    result = import_cards(path, services.cards, services.collections, t0)

    assert result.created == 1
    assert result.errors == [
        "card #1: front and back are required",
        "card #2: expected a mapping",
    ]


def test_tabs_are_tolerated(tmp_path):
    path = tmp_path / "tabs.yaml"
    path.write_text("collection: Tabs\ncards:\n\t- front: a\n\t  back: b\n")

    data = load_import_file(path)
    assert data["cards"] == [{"front": "a", "back": "b"}]


@pytest.mark.parametrize(
    "content, message",
    [
        ("- just\n- a list\n", "must contain a mapping"),
        ("cards: []\n", "missing 'collection'"),
        ("collection: X\ncards: nope\n", "must be a list"),
        ("collection: [unclosed\n", "Invalid YAML"),
    ],
)
def test_invalid_files(tmp_path, content, message):
    path = tmp_path / "deck.yaml"
    path.write_text(content)

    with pytest.raises(InvalidRequest, match=message):
        load_import_file(path)


def test_missing_file(tmp_path):
    with pytest.raises(InvalidRequest, match="Cannot read"):
        load_import_file(tmp_path / "nope.yaml")
