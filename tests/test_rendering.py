import unittest

from kadmin_panel.dashboard.rendering import format_payload, format_time, render_page
from kadmin_panel.data.models import MessagePage, MessageRecord


def make_record(offset: int, message, headers=None) -> MessageRecord:
    return MessageRecord(
        key=f"k{offset}",
        message=message,
        write_time=1_700_000_000_000 + offset * 1000,
        offset=offset,
        partition=0,
        topic="orders",
        headers=headers or {},
    )


class RenderPageTest(unittest.TestCase):
    def test_title_carries_running_total(self) -> None:
        rendered = render_page("orders", MessagePage(content=[], total_elements=12))
        self.assertEqual("(12) orders", rendered.title)
        self.assertEqual([], rendered.messages)

    def test_newest_message_first(self) -> None:
        page = MessagePage(content=[make_record(1, "a"), make_record(2, "b")], total_elements=2)

        rendered = render_page("orders", page)

        self.assertEqual([2, 1], [m.offset for m in rendered.messages])
        self.assertEqual(2, len({m.uid for m in rendered.messages}))

    def test_message_and_header_text(self) -> None:
        record = make_record(1, {"b": 1, "a": [1, 2]}, headers={"trace": "abc", "source": "api"})

        message = render_page("orders", MessagePage(content=[record], total_elements=1)).messages[0]

        self.assertEqual(format_payload({"a": [1, 2], "b": 1}), message.message_text)
        self.assertEqual("trace: abc\nsource: api", message.headers_text)
        self.assertEqual("22:13:21", message.write_time_text)

    def test_missing_payload_renders_null(self) -> None:
        self.assertEqual("null", format_payload(None))
        self.assertEqual("plain", format_payload("plain"))

    def test_unknown_time_renders_blank(self) -> None:
        self.assertEqual("", format_time(None))
        self.assertEqual("", format_time(-1))


if __name__ == "__main__":
    unittest.main()
