import json
import unittest
from unittest import mock

import requests

from kadmin_panel.data.clients import BackendEndpoint, BackendError, BackendErrorKind
from kadmin_panel.data.kadmin_client import KadminClient
from kadmin_panel.session.config import SessionConfig


def make_response(status: int = 200, payload=None, raw: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response.url = "http://kadmin/test"
    if raw is not None:
        response._content = raw
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = b""
    return response


class KadminClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.client = KadminClient(
            endpoint=BackendEndpoint(base_url="http://kadmin/", context_path="/app", timeout_seconds=3.0),
            session=self.session,
        )
        self.config = SessionConfig(topic="orders", deserializer_id="string", started=True, key_filter="user-1")

    def test_read_parses_consumer_and_page(self) -> None:
        self.session.request.return_value = make_response(
            payload={
                "consumerId": "c1",
                "page": {
                    "content": [
                        {
                            "key": "user-1",
                            "writeTime": 1700000000000,
                            "offset": 42,
                            "topic": "orders",
                            "message": {"amount": 10},
                            "headers": [{"key": "trace", "value": "abc"}],
                        }
                    ],
                    "totalElements": 7,
                },
            }
        )

        result = self.client.read(self.config)

        self.session.request.assert_called_once_with(
            "GET",
            "http://kadmin/app/api/kafka/read/orders?deserializerId=string&keyFilter=user-1",
            headers={"Accept": "application/json"},
            timeout=3.0,
        )
        self.assertEqual("c1", result.consumer_id)
        self.assertEqual(7, result.page.total_elements)
        record = result.page.content[0]
        self.assertEqual("user-1", record.key)
        self.assertEqual(42, record.offset)
        self.assertEqual({"amount": 10}, record.message)
        self.assertEqual({"trace": "abc"}, record.headers)

    def test_http_error_is_raised_as_backend_error(self) -> None:
        self.session.request.return_value = make_response(status=404, payload={"message": "Invalid deserializer id"})

        with self.assertRaises(BackendError) as ctx:
            self.client.read(self.config)

        self.assertEqual(BackendErrorKind.HTTP_STATUS, ctx.exception.kind)
        self.assertEqual(404, ctx.exception.status_code)

    def test_connection_error_is_network_failure(self) -> None:
        self.session.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(BackendError) as ctx:
            self.client.dispose("c1")

        self.assertEqual(BackendErrorKind.NETWORK_FAILURE, ctx.exception.kind)
        self.assertIsNone(ctx.exception.status_code)

    def test_invalid_json_is_network_failure(self) -> None:
        self.session.request.return_value = make_response(raw=b"<html>")

        with self.assertRaises(BackendError) as ctx:
            self.client.read(self.config)
        self.assertEqual(BackendErrorKind.NETWORK_FAILURE, ctx.exception.kind)

    def test_truncate_and_dispose_issue_deletes(self) -> None:
        self.session.request.return_value = make_response()

        self.client.truncate("c1")
        self.client.dispose("c1")

        urls = [(call.args[0], call.args[1]) for call in self.session.request.call_args_list]
        self.assertEqual(
            [
                ("DELETE", "http://kadmin/app/api/manager/consumers/c1/truncate"),
                ("DELETE", "http://kadmin/app/api/manager/consumers/c1"),
            ],
            urls,
        )

    def test_list_topics_passes_source_url(self) -> None:
        self.session.request.return_value = make_response(payload=["orders", "payments"])

        self.assertEqual(["orders", "payments"], self.client.list_topics("kafka:9092"))
        self.assertEqual(
            "http://kadmin/app/api/topics?source-url=kafka%3A9092",
            self.session.request.call_args.args[1],
        )

    def test_list_deserializers_accepts_page_or_list(self) -> None:
        for payload in ({"content": [{"id": "string", "name": "String"}]}, [{"id": "string", "name": "String"}]):
            with self.subTest(payload=payload):
                self.session.request.return_value = make_response(payload=payload)
                deserializers = self.client.list_deserializers()
                self.assertEqual(["string"], [d.id for d in deserializers])
                self.assertEqual(["String"], [d.name for d in deserializers])

    def test_list_consumers(self) -> None:
        self.session.request.return_value = make_response(
            payload={
                "content": [
                    {
                        "consumerGroupId": "kadmin-1",
                        "topic": "orders",
                        "deserializerId": "string",
                        "deserializerName": "String",
                        "lastMessageTime": -1,
                        "lastUsedTime": 1700000000000,
                        "queueSize": 50,
                        "total": 3,
                    }
                ],
                "totalElements": 1,
            }
        )

        consumers = self.client.list_consumers()

        self.assertEqual(1, len(consumers))
        self.assertEqual("kadmin-1", consumers[0].consumer_group_id)
        self.assertEqual(50, consumers[0].queue_size)
        self.assertEqual(3, consumers[0].total)


if __name__ == "__main__":
    unittest.main()
