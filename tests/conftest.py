"""Shared fixtures: fake AnkiConnect / ElevenLabs / Gemini endpoints."""

import json

import httpx
import pytest


class FakeAnkiConnect:
    """Minimal in-process AnkiConnect served through ``httpx.MockTransport``.

    ``notes`` maps note id -> Expression value. Every request body is kept in
    ``calls`` for assertions.
    """

    def __init__(self, notes=None, version=6):
        self.notes = dict(notes or {})
        self.version = version
        self.calls = []
        self.added = []
        self.fail_actions = {}
        self.next_id = 1000

    def _result(self, action, params):
        if action == "version":
            return self.version
        if action == "findNotes":
            query = params["query"]
            return [nid for nid, expr in self.notes.items() if f'Expression:"{expr}"' in query]
        if action == "notesInfo":
            return [
                {"noteId": nid, "fields": {"Expression": {"value": self.notes[nid], "order": 0}}}
                for nid in params["notes"]
                if nid in self.notes
            ]
        if action == "addNote":
            self.next_id += 1
            self.added.append(params["note"])
            self.notes[self.next_id] = params["note"]["fields"]["Expression"]
            return self.next_id
        raise AssertionError(f"unexpected action {action}")

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        action = body["action"]
        if action in self.fail_actions:
            return httpx.Response(200, json={"result": None, "error": self.fail_actions[action]})
        return httpx.Response(200, json={"result": self._result(action, body.get("params", {})), "error": None})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_anki():
    return FakeAnkiConnect(notes={1: "Ναι", 2: "Καλημέρα"})


def unreachable_transport() -> httpx.MockTransport:
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)
    return httpx.MockTransport(handler)


@pytest.fixture
def dead_transport():
    return unreachable_transport()
