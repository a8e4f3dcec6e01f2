import pytest

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.services.chat_service import chat_key


@pytest.mark.parametrize("a, b", [("AA10000000", "ZZ99999999"), ("QW12345678", "QA12345678"), ("AB10000000", "AB10000000")])
def test_chat_key_is_symmetric(a, b):
    assert chat_key(a, b) == chat_key(b, a)
    assert chat_key(a, b) == "__".join(sorted([a, b]))

def test_open_chat_creates_sorted_chat(chat_store, alice, bob):
    chat = chat_store.open_chat(alice.id, bob.id)
    assert chat.id == chat_key(alice.id, bob.id)
    assert chat.users == sorted([alice.id, bob.id])
    assert chat.messages == []

def test_open_chat_is_idempotent_and_order_free(chat_store, chat_state, alice, bob):
    first = chat_store.open_chat(alice.id, bob.id)
    chat_store.post_message(first.id, alice.id, "hi")
    version = chat_state.version

    second = chat_store.open_chat(bob.id, alice.id)
    assert second is first
    assert len(second.messages) == 1
    assert len(chat_state.chats) == 1
    assert chat_state.version == version

def test_open_chat_with_unknown_user(chat_store, chat_state, alice):
    with pytest.raises(NotFoundError):
        chat_store.open_chat(alice.id, "ID2")
    assert chat_state.chats == {}

def test_open_chat_requires_both_ids(chat_store, alice):
    with pytest.raises(ValidationError):
        chat_store.open_chat(alice.id, None)

def test_open_chat_with_self(chat_store, alice):
    chat = chat_store.open_chat(alice.id, alice.id)
    assert chat.users == [alice.id, alice.id]

def test_post_message_appends_in_order(chat_store, identity, alice, bob):
    chat = chat_store.open_chat(alice.id, bob.id)
    first = chat_store.post_message(chat.id, alice.id, "hi")
    second = chat_store.post_message(chat.id, bob.id, "hello")

    assert first.ts is not None
    assert first.reactions == []
    assert [m.text for m in chat_store.get_chat(chat.id).messages] == ["hi", "hello"]
    assert first.ts <= second.ts
    assert identity.get_by_id(bob.id).last_seen == second.ts

def test_post_message_from_outsider_is_forbidden(chat_store, identity, alice, bob):
    carol = identity.register("@carol", "Carol")
    chat = chat_store.open_chat(alice.id, bob.id)
    with pytest.raises(ForbiddenError):
        chat_store.post_message(chat.id, carol.id, "let me in")
    assert chat.messages == []

@pytest.mark.parametrize("sender, text", [(None, "hi"), ("self", None), ("self", ""), ("self", 42)])
def test_post_message_validation(chat_store, alice, bob, sender, text):
    chat = chat_store.open_chat(alice.id, bob.id)
    with pytest.raises(ValidationError):
        chat_store.post_message(chat.id, alice.id if sender == "self" else sender, text)

def test_post_message_unknown_chat(chat_store, alice):
    with pytest.raises(NotFoundError):
        chat_store.post_message("nope", alice.id, "hi")

def test_react_appends_reactions(chat_store, alice, bob):
    chat = chat_store.open_chat(alice.id, bob.id)
    chat_store.post_message(chat.id, alice.id, "hi")
    chat_store.react(chat.id, 0, "👍", bob.id)
    chat_store.react(chat.id, 0, "👍", bob.id)

    reactions = chat.messages[0].reactions
    assert [(r.sender, r.emoji) for r in reactions] == [(bob.id, "👍"), (bob.id, "👍")]

@pytest.mark.parametrize("index", [1, 5])
def test_react_out_of_range_is_not_found(chat_store, alice, bob, index):
    chat = chat_store.open_chat(alice.id, bob.id)
    chat_store.post_message(chat.id, alice.id, "hi")
    with pytest.raises(NotFoundError):
        chat_store.react(chat.id, index, "👍", bob.id)

@pytest.mark.parametrize("index, emoji", [(-1, "👍"), ("0", "👍"), (True, "👍"), (0.5, "👍"), (None, "👍"), (0, None)])
def test_react_validation(chat_store, alice, bob, index, emoji):
    chat = chat_store.open_chat(alice.id, bob.id)
    chat_store.post_message(chat.id, alice.id, "hi")
    with pytest.raises(ValidationError):
        chat_store.react(chat.id, index, emoji, bob.id)

def test_react_unknown_chat(chat_store, bob):
    with pytest.raises(NotFoundError):
        chat_store.react("nope", 0, "👍", bob.id)

def test_list_user_chats(chat_store, identity, alice, bob):
    carol = identity.register("@carol", "Carol")
    ab = chat_store.open_chat(alice.id, bob.id)
    bc = chat_store.open_chat(bob.id, carol.id)
    assert [c.id for c in chat_store.list_user_chats(bob.id)] == [ab.id, bc.id]
    assert [c.id for c in chat_store.list_user_chats(alice.id)] == [ab.id]
    with pytest.raises(NotFoundError):
        chat_store.list_user_chats("ZZ00000000")
