import json
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from yojana_assistant.agent import ChatAgent
from yojana_assistant.llm import MockLLMClient
from yojana_assistant.memory import InMemorySessionStore
from yojana_assistant.tools import StaticSchemeSource


SAMPLE_YOJANAS = [
    {
        "YojanaId": 1,
        "YojanaName": "ADIP Scheme",
        "Start_Age": 0,
        "UpTo_Age": 60,
        "DisabilityType": "physical, hearing, vision",
        "tblYojanaDivyangTypePercentages": [{"DivyangType": "hearing", "Percentage": 40}],
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 2,
        "YojanaName": "National Fellowship",
        "Start_Age": 18,
        "UpTo_Age": 35,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": 40,
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 3,
        "YojanaName": "Niramaya Health Insurance",
        "Start_Age": 0,
        "UpTo_Age": 65,
        "DisabilityType": "intellectual, autism, cerebral palsy",
        "PublishedBy": "National Trust",
    },
    {
        "YojanaId": 4,
        "YojanaName": "Indira Gandhi Disability Pension",
        "Start_Age": 18,
        "UpTo_Age": 79,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": [{"Percentage": 80}],
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 5,
        "YojanaName": "School Scholarship",
        "Start_Age": 5,
        "UpTo_Age": 18,
        "DisabilityType": "all",
        "PublishedBy": "State Government",
    },
]


def model_reply(message, links=None, yojanas=None):
    return json.dumps({
        "message": message,
        "links": links or [],
        "yojanas": yojanas or []
    }, ensure_ascii=False)


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 10, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheme_source():
    return StaticSchemeSource(SAMPLE_YOJANAS)


@pytest.fixture
def session_store():
    return InMemorySessionStore(idle_timeout=timedelta(minutes=30), max_turns=10)


@pytest.fixture
def llm():
    return MockLLMClient([model_reply("Here are some yojanas.")])


@pytest.fixture
def agent(llm, scheme_source, session_store):
    return ChatAgent(
        llm_client=llm,
        scheme_source=scheme_source,
        session_store=session_store,
        scheme_cap=10,
        fallback_on_empty=False,
        history_window=10
    )


@pytest.fixture
def client(agent):
    import server

    server.app.dependency_overrides[server.get_agent] = lambda: agent
    with TestClient(server.app) as test_client:
        yield test_client
    server.app.dependency_overrides.clear()
