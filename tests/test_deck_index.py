"""Tests for the plain-text export expression index."""

import pytest

from anki_glossa.deck_index import ExpressionIndex, NoteEntry, build_from_export

EXPORT = (
    "#separator:tab\n"
    "#html:true\n"
    "#guid column:1\n"
    "#notetype column:2\n"
    "#deck column:3\n"
    "#tags column:8\n"
    "abc1\tBasic\tGreek\tΝαι\tyes<br>Да\t\t[sound:greek_1.mp3]\tgreek\n"
    "abc2\tBasic\tGreek\t<b>Καλημέρα</b>\tgood morning\t\t\tgreek\n"
    "abc3\tBasic\tOther\tΌχι\tno\t\t\t\n"
    "abc4\tBasic\tGreek\tΧαίρε&nbsp;!\thi\t\t\tgreek\n"
    "short\tline\n"
)


@pytest.fixture
def export_file(tmp_path):
    path = tmp_path / "deck.txt"
    path.write_text(EXPORT, encoding="utf-8")
    return path


class TestExpressionIndex:
    """Test the in-memory index."""

    def test_add_and_contains(self):
        index = ExpressionIndex()
        index.add_note(NoteEntry(note_id="n1", model="Basic", deck="Greek", expression="Ναι"))
        assert index.contains("Ναι")
        assert index.contains("  Ναι ")
        assert not index.contains("Όχι")
        assert index.expressions["Ναι"] == {"n1"}

    def test_nfc_matching(self):
        """Decomposed accents match precomposed expressions."""
        index = ExpressionIndex()
        index.add_note(NoteEntry(note_id="n1", model="Basic", deck="Greek", expression="Όχι"))
        assert index.contains("Όχι")

    def test_empty_expression_not_indexed(self):
        index = ExpressionIndex()
        index.add_note(NoteEntry(note_id="n1", model="Basic", deck="Greek", expression=""))
        assert index.expressions == {}
        assert len(index.notes) == 1

    def test_lookup_returns_input_strings(self):
        index = ExpressionIndex()
        index.add_note(NoteEntry(note_id="n1", model="Basic", deck="Greek", expression="Ναι"))
        assert index.lookup(["Ναι", "Όχι"]) == {"Ναι"}


class TestBuildFromExport:
    """Test parsing of Anki plain-text exports."""

    def test_parses_notes(self, export_file):
        index = build_from_export(export_file)
        assert len(index.notes) == 4
        assert index.contains("Ναι")
        assert index.contains("Όχι")

    def test_html_and_entities_cleaned(self, export_file):
        index = build_from_export(export_file)
        assert index.contains("Καλημέρα")
        assert index.contains("Χαίρε !")

    def test_deck_filter(self, export_file):
        index = build_from_export(export_file, deck_name="Greek")
        assert not index.contains("Όχι")
        assert len(index.notes) == 3

    def test_expression_field_index(self, export_file):
        index = build_from_export(export_file, expression_index=1)
        assert index.contains("good morning")

    def test_missing_file(self, tmp_path):
        index = build_from_export(tmp_path / "missing.txt")
        assert index.notes == []
