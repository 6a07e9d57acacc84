"""Tests for the AnkiConnect client and payload builders."""

import base64

import httpx
import pytest

from anki_glossa.anki_connect import (
    AnkiConnectClient,
    AnkiConnectError,
    build_duplicate_query,
    build_note,
    check_connection,
)
from anki_glossa.segment import CardDraft


class TestBuildDuplicateQuery:
    """Test findNotes query construction."""

    def test_or_query(self):
        query = build_duplicate_query(["Ναι", "Όχι"])
        assert query == '((Expression:"Ναι") OR (Expression:"Όχι"))'

    def test_deck_filter(self):
        query = build_duplicate_query(["Ναι"], deck_name="Greek::Basics")
        assert query == 'deck:"Greek::Basics" ((Expression:"Ναι"))'

    def test_quotes_escaped(self):
        query = build_duplicate_query(['Λέει "ναι"'])
        assert query == '((Expression:"Λέει \\"ναι\\""))'

    def test_custom_field(self):
        assert build_duplicate_query(["Ναι"], field="Front") == '((Front:"Ναι"))'


class TestBuildNote:
    """Test addNote payloads."""

    def test_fields_and_tags(self):
        card = CardDraft(script="Ναι", translation="yes\nДа", annotation="line1\nline2", id="c1")
        note = build_note(card, deck_name="Greek", model_name="Greek (audio)")
        assert note["deckName"] == "Greek"
        assert note["modelName"] == "Greek (audio)"
        assert note["fields"] == {
            "Expression": "Ναι",
            "Meaning": "yes<br>Да",
            "RussianExplanation": "line1<br>line2",
            "Audio": "",
        }
        assert note["tags"] == ["greek", "elevenlabs"]
        assert "audio" not in note

    def test_audio_entry(self):
        card = CardDraft(script="Ναι", id="c1")
        note = build_note(card, audio=b"ID3mp3")
        assert note["audio"] == [
            {
                "data": base64.b64encode(b"ID3mp3").decode("ascii"),
                "filename": "greek_c1.mp3",
                "fields": ["Audio"],
            }
        ]

    def test_empty_audio_ignored(self):
        assert "audio" not in build_note(CardDraft(script="Ναι"), audio=b"")


class TestAnkiConnectClient:
    """Test the HTTP client against a fake AnkiConnect."""

    def test_invoke_payload(self, fake_anki):
        client = AnkiConnectClient(transport=fake_anki.transport())
        assert client.version() == 6
        assert fake_anki.calls == [{"action": "version", "version": 6}]

    def test_error_raises(self, fake_anki):
        fake_anki.fail_actions["findNotes"] = "collection is not available"
        client = AnkiConnectClient(transport=fake_anki.transport())
        with pytest.raises(AnkiConnectError, match="collection is not available"):
            client.find_notes("Ναι")

    def test_http_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        client = AnkiConnectClient(transport=transport)
        with pytest.raises(httpx.HTTPStatusError):
            client.version()

    def test_find_existing_expressions(self, fake_anki):
        client = AnkiConnectClient(transport=fake_anki.transport())
        existing = client.find_existing_expressions(["Ναι", "Όχι"], deck_name="Greek")
        assert existing == {"Ναι"}
        actions = [c["action"] for c in fake_anki.calls]
        assert actions == ["findNotes", "notesInfo"]
        assert fake_anki.calls[0]["params"]["query"].startswith('deck:"Greek" ')
        assert fake_anki.calls[1]["params"]["notes"] == [1]

    def test_no_matches_skips_notes_info(self, fake_anki):
        client = AnkiConnectClient(transport=fake_anki.transport())
        assert client.find_existing_expressions(["Όχι"]) == set()
        assert [c["action"] for c in fake_anki.calls] == ["findNotes"]

    def test_empty_expressions_no_request(self, fake_anki):
        client = AnkiConnectClient(transport=fake_anki.transport())
        assert client.find_existing_expressions([]) == set()
        assert fake_anki.calls == []

    def test_add_note(self, fake_anki):
        with AnkiConnectClient(transport=fake_anki.transport()) as client:
            note_id = client.add_note(build_note(CardDraft(script="Όχι", translation="no")))
        assert note_id == 1001
        assert fake_anki.added[0]["fields"]["Expression"] == "Όχι"


class TestCheckConnection:
    """Test the connection probe."""

    def test_connected(self, fake_anki):
        status = check_connection(AnkiConnectClient(transport=fake_anki.transport()))
        assert status == {"connected": True, "version": 6}

    def test_unreachable(self, dead_transport):
        status = check_connection(AnkiConnectClient(transport=dead_transport))
        assert status["connected"] is False
        assert "Is Anki running?" in status["error"]
        assert "Connection refused" in status["details"]

    def test_anki_error(self, fake_anki):
        fake_anki.fail_actions["version"] = "unsupported"
        status = check_connection(AnkiConnectClient(transport=fake_anki.transport()))
        assert status == {"connected": False, "error": "AnkiConnect error: unsupported"}

    def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(403, text="forbidden"))
        status = check_connection(AnkiConnectClient(transport=transport))
        assert status["connected"] is False
        assert status["error"] == "HTTP 403: forbidden"
