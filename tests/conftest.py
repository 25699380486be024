import pytest

from models import ExtractionConfig, WebsiteContent


class FakeGenerator:
    """Replays canned responses; an Exception instance in the script is raised instead."""

    def __init__(self, responses, events=None):
        self.responses = list(responses)
        self.prompts = []
        self.events = events if events is not None else []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.events.append("call")
        reply = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class RecordingPacing:
    def __init__(self, events=None):
        self.events = events if events is not None else []

    def wait(self):
        self.events.append("wait")


@pytest.fixture
def config():
    return ExtractionConfig(delay_seconds=0)


@pytest.fixture
def events():
    return []


@pytest.fixture
def pacing(events):
    return RecordingPacing(events)


@pytest.fixture
def make_generator(events):
    def _make(*responses):
        return FakeGenerator(responses, events)
    return _make


@pytest.fixture
def contact_site():
    return WebsiteContent(
        url="https://acme.example.org/contact",
        keyword="plumber miami",
        content="Acme Plumbing Services\nCall us today\nsales@acmeplumbing.com\n(305) 555-0199",
    )


@pytest.fixture
def make_words():
    def _words(n: int, prefix: str = "w") -> str:
        return " ".join(f"{prefix}{i}" for i in range(n))
    return _words
