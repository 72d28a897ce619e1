import json
import unittest

from h_cli.core import (
    Conversation,
    MalformedConversationError,
    Message,
    TurnOrderError,
    append_assistant_turn,
    append_user_turn,
    load_conversation,
    new_conversation,
    serialize,
)

from .test_base import PREAMBLE


class TestConversation(unittest.TestCase):
    def test_new_conversation_holds_only_the_preamble(self):
        conversation = new_conversation(PREAMBLE)
        self.assertEqual(len(conversation), 1)
        self.assertEqual(conversation[0], Message("system", PREAMBLE))

    def test_append_returns_new_conversation(self):
        original = new_conversation(PREAMBLE)
        with_user = append_user_turn(original, "hi")
        with_reply = append_assistant_turn(with_user, "hello")

        self.assertEqual(len(original), 1)  # untouched
        self.assertEqual(len(with_user), 2)
        self.assertEqual(
            [(m.role, m.content) for m in with_reply],
            [("system", PREAMBLE), ("user", "hi"), ("assistant", "hello")],
        )

    def test_empty_content_is_allowed(self):
        conversation = append_user_turn(new_conversation(PREAMBLE), "")
        self.assertEqual(conversation[-1].content, "")

    def test_none_content_is_rejected(self):
        with self.assertRaises(TypeError):
            append_user_turn(new_conversation(PREAMBLE), None)

    def test_unknown_role_is_rejected(self):
        with self.assertRaises(ValueError):
            Message("tool", "x")

    def test_two_user_turns_in_a_row_are_refused(self):
        conversation = append_user_turn(new_conversation(PREAMBLE), "one")
        with self.assertRaises(TurnOrderError):
            append_user_turn(conversation, "two")

    def test_two_assistant_turns_in_a_row_are_refused(self):
        conversation = append_assistant_turn(
            append_user_turn(new_conversation(PREAMBLE), "q"), "a"
        )
        with self.assertRaises(TurnOrderError):
            append_assistant_turn(conversation, "again")

    def test_assistant_cannot_follow_system(self):
        with self.assertRaises(TurnOrderError):
            append_assistant_turn(new_conversation(PREAMBLE), "unprompted")


class TestLoadConversation(unittest.TestCase):
    def test_round_trip(self):
        conversation = new_conversation(PREAMBLE)
        for i in range(3):
            conversation = append_user_turn(conversation, f"question {i}")
            conversation = append_assistant_turn(conversation, f"answer {i} – ünïcode")

        self.assertEqual(load_conversation(serialize(conversation)), conversation)

    def test_serialized_form_is_message_array(self):
        conversation = append_user_turn(new_conversation(PREAMBLE), "hi")
        self.assertEqual(
            json.loads(serialize(conversation)),
            [{"role": "system", "content": PREAMBLE}, {"role": "user", "content": "hi"}],
        )

    def test_empty_payloads_are_absent(self):
        for raw in (None, "", "   \n", "[]"):
            with self.subTest(raw=raw):
                self.assertIsNone(load_conversation(raw))

    def test_invalid_json_is_malformed_with_cause(self):
        with self.assertRaises(MalformedConversationError) as ctx:
            load_conversation("[{not json")
        self.assertIsInstance(ctx.exception.__cause__, json.JSONDecodeError)

    def test_wrong_shapes_are_malformed(self):
        bad_payloads = [
            '{"role": "user", "content": "hi"}',
            '["hi"]',
            '[{"role": "robot", "content": "hi"}]',
            '[{"role": "user"}]',
            '[{"role": "user", "content": null}]',
        ]
        for raw in bad_payloads:
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedConversationError):
                    load_conversation(raw)

    def test_out_of_order_turns_are_malformed(self):
        raw = json.dumps([
            {"role": "system", "content": PREAMBLE},
            {"role": "user", "content": "a"},
            {"role": "user", "content": "b"},
        ])
        with self.assertRaises(MalformedConversationError) as ctx:
            load_conversation(raw)
        self.assertIsInstance(ctx.exception.__cause__, TurnOrderError)

    def test_unanswered_user_turn_is_malformed(self):
        raw = json.dumps([
            {"role": "system", "content": PREAMBLE},
            {"role": "user", "content": "a"},
        ])
        with self.assertRaises(MalformedConversationError) as ctx:
            load_conversation(raw)
        self.assertIsInstance(ctx.exception.__cause__, TurnOrderError)

    def test_conversation_without_system_message_loads(self):
        raw = json.dumps([
            {"role": "user", "content": "a"},
            {"role": "assistant", "content": "b"},
        ])
        self.assertEqual(
            load_conversation(raw),
            Conversation((Message("user", "a"), Message("assistant", "b"))),
        )


if __name__ == "__main__":
    unittest.main()
