from __future__ import annotations

import io
import os
import unittest
import urllib.error
import urllib.parse
from unittest import mock

from mipush_channel.adapters.config import XiaomiChannelConfig
from mipush_channel.adapters.real_senders import XiaomiSender, parse_send_result

SUCCESS_BODY = (
    b'{"result":"ok","trace_id":"Xcm01b","code":0,'
    b'"data":{"id":"slm01b"},"description":"success","info":"Received push messages for 2 REGID"}'
)


class XiaomiSenderTests(unittest.TestCase):
    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_send_batch_posts_form_to_regid_endpoint(self, urlopen_mock: mock.Mock) -> None:
        response = urlopen_mock.return_value.__enter__.return_value
        response.getcode.return_value = 200
        response.read.return_value = SUCCESS_BODY
        sender = XiaomiSender(
            "secret==",
            restricted_package_name="com.example.app",
            base_url="https://api.xmpush.xiaomi.com/",
            timeout_seconds=5,
        )

        result = sender.send_batch(
            message={"title": "Hello", "description": "World", "extra.notify_effect": "1"},
            registration_ids=["reg-1", "reg-2"],
        )

        request_obj = urlopen_mock.call_args.args[0]
        self.assertEqual(request_obj.full_url, "https://api.xmpush.xiaomi.com/v3/message/regid")
        self.assertEqual(request_obj.get_header("Authorization"), "key=secret==")
        self.assertEqual(urlopen_mock.call_args.kwargs["timeout"], 5)

        payload = urllib.parse.parse_qs((request_obj.data or b"").decode("utf-8"))
        self.assertEqual(payload["registration_id"][0], "reg-1,reg-2")
        self.assertEqual(payload["title"][0], "Hello")
        self.assertEqual(payload["extra.notify_effect"][0], "1")
        self.assertEqual(payload["restricted_package_name"][0], "com.example.app")

        self.assertEqual(result["code"], 0)
        self.assertEqual(result["message_id"], "slm01b")
        self.assertEqual(result["trace_id"], "Xcm01b")

    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_provider_error_code_is_returned_not_raised(self, urlopen_mock: mock.Mock) -> None:
        response = urlopen_mock.return_value.__enter__.return_value
        response.getcode.return_value = 200
        response.read.return_value = (
            b'{"result":"error","reason":"No valid targets!","code":20301,'
            b'"description":"send failed"}'
        )

        result = XiaomiSender("secret").send({"title": "x"}, ["reg-1"])

        self.assertEqual(result["code"], 20301)
        self.assertEqual(result["reason"], "No valid targets!")

    @mock.patch("mipush_channel.adapters.real_senders.time.sleep")
    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_transport_errors_are_retried(
        self, urlopen_mock: mock.Mock, sleep_mock: mock.Mock
    ) -> None:
        response = mock.MagicMock()
        response.__enter__.return_value.getcode.return_value = 200
        response.__enter__.return_value.read.return_value = SUCCESS_BODY
        urlopen_mock.side_effect = [
            urllib.error.URLError("timed out"),
            urllib.error.URLError("timed out"),
            response,
        ]

        result = XiaomiSender("secret", backoff_seconds=0.5).send({"title": "x"}, ["r"], retries=3)

        self.assertEqual(result["code"], 0)
        self.assertEqual(urlopen_mock.call_count, 3)
        self.assertEqual([call.args[0] for call in sleep_mock.call_args_list], [0.5, 1.0])

    @mock.patch("mipush_channel.adapters.real_senders.time.sleep")
    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_read_timeout_and_reset_are_retried(
        self, urlopen_mock: mock.Mock, sleep_mock: mock.Mock
    ) -> None:
        response = mock.MagicMock()
        response.__enter__.return_value.getcode.return_value = 200
        response.__enter__.return_value.read.return_value = SUCCESS_BODY
        urlopen_mock.side_effect = [
            TimeoutError("The read operation timed out"),
            ConnectionResetError("Connection reset by peer"),
            response,
        ]

        result = XiaomiSender("secret").send({"title": "x"}, ["r"], retries=3)

        self.assertEqual(result["code"], 0)
        self.assertEqual(urlopen_mock.call_count, 3)
        self.assertEqual(sleep_mock.call_count, 2)

    @mock.patch("mipush_channel.adapters.real_senders.time.sleep")
    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_persistent_read_timeout_raises_runtime_error(
        self, urlopen_mock: mock.Mock, sleep_mock: mock.Mock
    ) -> None:
        urlopen_mock.side_effect = TimeoutError("The read operation timed out")

        with self.assertRaises(RuntimeError) as exc:
            XiaomiSender("secret", retries=1).send_batch(
                message={"title": "x"}, registration_ids=["r"]
            )

        self.assertIn("timed out", str(exc.exception))
        self.assertEqual(urlopen_mock.call_count, 2)

    @mock.patch("mipush_channel.adapters.real_senders.time.sleep")
    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_retries_exhausted_raises(
        self, urlopen_mock: mock.Mock, sleep_mock: mock.Mock
    ) -> None:
        urlopen_mock.side_effect = urllib.error.URLError("connection refused")

        with self.assertRaises(RuntimeError) as exc:
            XiaomiSender("secret", retries=2).send_batch(
                message={"title": "x"}, registration_ids=["r"]
            )

        self.assertIn("connection refused", str(exc.exception))
        self.assertEqual(urlopen_mock.call_count, 3)
        self.assertEqual(sleep_mock.call_count, 2)

    @mock.patch("mipush_channel.adapters.real_senders.urllib.request.urlopen")
    def test_http_error_is_not_retried(self, urlopen_mock: mock.Mock) -> None:
        urlopen_mock.side_effect = urllib.error.HTTPError(
            url="https://api.xmpush.xiaomi.com/v3/message/regid",
            code=401,
            msg="Unauthorized",
            hdrs=None,
            fp=io.BytesIO(b'{"reason":"invalid secret"}'),
        )

        with self.assertRaises(RuntimeError) as exc:
            XiaomiSender("secret").send({"title": "x"}, ["r"])

        self.assertIn("HTTP 401", str(exc.exception))
        self.assertEqual(urlopen_mock.call_count, 1)

    def test_closed_sender_refuses_to_send(self) -> None:
        sender = XiaomiSender("secret")
        sender.close()

        self.assertTrue(sender.closed)
        with self.assertRaises(RuntimeError):
            sender.send({"title": "x"}, ["r"])

    def test_empty_secret_is_rejected(self) -> None:
        with self.assertRaises(RuntimeError):
            XiaomiSender("  ")

    def test_parse_send_result_rejects_non_json(self) -> None:
        with self.assertRaises(RuntimeError):
            parse_send_result(b"<html>bad gateway</html>")


class ChannelConfigTests(unittest.TestCase):
    @mock.patch.dict(
        os.environ,
        {
            "XIAOMI_ANDROID_APP_SECRET": " android-secret ",
            "XIAOMI_IOS_APP_SECRET": "ios-secret",
            "XIAOMI_ANDROID_PACKAGE_NAME": "com.example.app",
            "XIAOMI_PUSH_USE_SANDBOX": "yes",
            "XIAOMI_PUSH_BATCH_SIZE": "500",
            "XIAOMI_PUSH_RETRIES": "1",
        },
        clear=True,
    )
    def test_from_env_reads_credentials_and_options(self) -> None:
        config = XiaomiChannelConfig.from_env()

        self.assertEqual(config.android_app_secret, "android-secret")
        self.assertEqual(config.ios_app_secret, "ios-secret")
        self.assertEqual(config.android_package_name, "com.example.app")
        self.assertEqual(config.base_url, "https://sandbox.xmpush.xiaomi.com")
        self.assertEqual(config.batch_size, 500)
        self.assertEqual(config.retries, 1)

    @mock.patch.dict(os.environ, {"XIAOMI_ANDROID_APP_SECRET": "a"}, clear=True)
    def test_from_env_requires_both_secrets(self) -> None:
        with self.assertRaises(RuntimeError) as exc:
            XiaomiChannelConfig.from_env()

        self.assertIn("XIAOMI_IOS_APP_SECRET", str(exc.exception))

    @mock.patch.dict(
        os.environ,
        {
            "XIAOMI_ANDROID_APP_SECRET": "a",
            "XIAOMI_IOS_APP_SECRET": "b",
            "XIAOMI_PUSH_BATCH_SIZE": "1001",
        },
        clear=True,
    )
    def test_from_env_rejects_batch_size_over_provider_limit(self) -> None:
        with self.assertRaises(RuntimeError):
            XiaomiChannelConfig.from_env()


if __name__ == "__main__":
    unittest.main()
