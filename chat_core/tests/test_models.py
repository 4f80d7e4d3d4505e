from chat_core.domain.models import ContentPart, DisplayMessage, ProviderMessage, TranscriptSnapshot
from chat_core.domain.conversation import ConversationState, SEED_MESSAGE_ID


def test_models_exist():
    dm = DisplayMessage(id=1, author="Bot", text="hi", time="12:00:00")
    assert dm.author == "Bot"
    pm = ProviderMessage.from_text("user", "hello")
    assert pm.role == "user"
    assert pm.content == (ContentPart(text="hello"),)
    assert pm.text == "hello"
    snap = TranscriptSnapshot(messages=(dm,), history=(pm,), busy=False)
    messages, history, busy = snap
    assert messages[0].id == 1 and history[0].role == "user" and busy is False


def test_conversation_state_defaults():
    state = ConversationState()
    assert state.messages == [] and state.history == []
    assert state.next_id == SEED_MESSAGE_ID + 1
    assert state.busy is False
