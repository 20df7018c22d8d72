import pytest

from conftest import model_reply
from yojana_assistant.agent import ChatProcessingError, build_prompt
from yojana_assistant.llm import LLMTimeoutError
from yojana_assistant.schemas import ChatContext, ChatRequest
from yojana_assistant.tools import StaticSchemeSource
from yojana_assistant.tools.links import LOGIN_LINK, REGISTER_LINK, LINK_CATALOG


def ask(message, user_id="u1", locale=None, awaiting_age=False):
    return ChatRequest(
        message=message,
        context=ChatContext(userId=user_id, locale=locale, awaitingAge=awaiting_age)
    )


@pytest.mark.asyncio
async def test_login_is_answered_without_model(agent, llm):
    response = await agent.handle(ask("login", locale="en-IN"))
    assert response.links == [LOGIN_LINK]
    assert response.yojanas == []
    assert response.message == "Use the link below to log in to the Divyang Portal."
    assert llm.call_count == 0


@pytest.mark.asyncio
async def test_marathi_registration(agent, llm):
    response = await agent.handle(ask("नोंदणी करायची आहे"))
    assert response.links == [REGISTER_LINK]
    assert "नोंदणी" in response.message
    assert llm.call_count == 0


@pytest.mark.asyncio
async def test_login_and_register_together(agent):
    response = await agent.handle(ask("how to register and login", locale="en"))
    assert response.links == [LOGIN_LINK, REGISTER_LINK]


@pytest.mark.asyncio
async def test_scheme_question_goes_to_model(agent, llm):
    llm.replies = [model_reply("These fit you.", yojanas=["1", "2"])]
    response = await agent.handle(ask("age 25, hearing, 60%", locale="en-IN"))

    assert llm.call_count == 1
    assert response.message == "These fit you."
    assert [s.id for s in response.yojanas] == ["1", "2"]
    assert '"age": 25' in llm.last_prompt
    assert "English" in llm.last_system_prompt


@pytest.mark.asyncio
async def test_prompt_only_carries_filtered_candidates(agent, llm):
    await agent.handle(ask("age 25, hearing, 60%"))
    assert '"id": "1"' in llm.last_system_prompt
    assert '"id": "2"' in llm.last_system_prompt
    # filtered out by age, type or percentage
    for excluded in ("3", "4", "5"):
        assert f'"id": "{excluded}"' not in llm.last_system_prompt


@pytest.mark.asyncio
async def test_model_links_are_sanitized(agent, llm):
    llm.replies = [model_reply("See these", links=[
        {"label": "Login", "url": LOGIN_LINK.url},
        {"label": "Apply now", "url": "https://example.com/apply"},
    ])]
    response = await agent.handle(ask("what yojanas are there?"))
    assert response.links == [LOGIN_LINK]


@pytest.mark.asyncio
async def test_model_cannot_return_non_candidate_schemes(agent, llm):
    # "5" is excluded by age and "99" does not exist
    llm.replies = [model_reply("ok", yojanas=["1", {"id": "2"}, "5", "99", "1"])]
    response = await agent.handle(ask("age 30 yojana"))
    assert [s.id for s in response.yojanas] == ["1", "2"]


@pytest.mark.asyncio
async def test_prose_reply_becomes_message(agent, llm):
    llm.replies = ["You may be eligible for a pension."]
    response = await agent.handle(ask("pension?"))
    assert response.message == "You may be eligible for a pension."
    assert response.links == []
    assert response.yojanas == []


@pytest.mark.asyncio
async def test_empty_message_field_becomes_apology(agent, llm):
    llm.replies = ['{"message": "", "links": []}']
    response = await agent.handle(ask("scheme", locale="en-IN"))
    assert response.message == "Sorry, something went wrong."


@pytest.mark.asyncio
async def test_model_failure_raises_processing_error(agent, llm):
    llm.replies = [LLMTimeoutError("slow")]
    with pytest.raises(ChatProcessingError) as info:
        await agent.handle(ask("yojana", locale="hi-IN"))
    assert info.value.language == "hindi"
    assert info.value.apology == "क्षमा करें, कुछ गलत हो गया।"


@pytest.mark.asyncio
async def test_slots_accumulate_across_turns(agent, llm, session_store):
    await agent.handle(ask("I am 25 years old", user_id="multi"))
    await agent.handle(ask("I have 60% hearing loss", user_id="multi"))

    session = session_store.get("multi")
    assert session.slots == {"age": 25, "percentage": 60, "disabilityCategory": "hearing"}
    assert '"age": 25' in llm.last_prompt
    assert "Recent conversation" in llm.last_prompt
    assert len(session.turns) == 4


@pytest.mark.asyncio
async def test_users_do_not_share_sessions(agent, session_store):
    await agent.handle(ask("age 40 yojana", user_id="a"))
    await agent.handle(ask("yojana", user_id="b"))
    assert session_store.get("a").slots == {"age": 40}
    assert session_store.get("b").slots == {}


@pytest.mark.asyncio
async def test_missing_context_uses_anonymous_session(agent, session_store):
    await agent.handle(ChatRequest(message="login"))
    assert session_store.get("anonymous") is not None


@pytest.mark.asyncio
async def test_awaiting_age_reads_plain_number(agent, session_store):
    await agent.handle(ask("42", user_id="ageing", awaiting_age=True))
    assert session_store.get("ageing").slots == {"age": 42}


@pytest.mark.asyncio
async def test_language_detected_from_text(agent):
    response = await agent.handle(ask("मुझे लॉगिन करना है", user_id="hi"))
    assert response.message.startswith("दिव्यांग पोर्टल पर लॉगिन")


@pytest.mark.asyncio
async def test_empty_scheme_source_still_answers(llm, session_store):
    from yojana_assistant.agent import ChatAgent

    agent = ChatAgent(
        llm_client=llm,
        scheme_source=StaticSchemeSource([]),
        session_store=session_store,
        scheme_cap=10,
        fallback_on_empty=False,
        history_window=10
    )
    llm.replies = [model_reply("No yojanas right now.", yojanas=["1"])]
    response = await agent.handle(ask("yojana"))
    assert response.message == "No yojanas right now."
    assert response.yojanas == []


def test_build_prompt_caps_schemes():
    import asyncio

    schemes = asyncio.run(StaticSchemeSource().fetch())
    prompt = build_prompt("hi", LINK_CATALOG, schemes, language="english", max_schemes=2)
    assert '"id": "1"' in prompt.system
    assert '"id": "3"' not in prompt.system
    assert LOGIN_LINK.url in prompt.system
    assert 'User message: "hi"' in prompt.user
