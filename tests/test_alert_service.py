"""告警服务测试（mock 投递器）。"""
from unittest.mock import MagicMock

from opsgenie_forwarder.core.models import DispatchOutcome, DispatchResult, FailureKind
from opsgenie_forwarder.senders.dispatcher import Dispatcher
from opsgenie_forwarder.services.alert_service import AlertService

from conftest import BASE_URL, ScriptedTransport, failed, ok_result


def _service(config, result=None):
    dispatcher = MagicMock()
    dispatcher.send.return_value = result or DispatchResult(
        outcome=DispatchOutcome.SUCCESS, attempts=1, status_code=202
    )
    return AlertService(config, dispatcher=dispatcher), dispatcher


class TestAlertService:
    def test_missing_action_no_http_call(self, config):
        service, dispatcher = _service(config)
        result = service.process_event({"message": "m"})
        dispatcher.send.assert_not_called()
        assert result["status"] == "skipped"
        assert service.stats["discarded"] == 1

    def test_unknown_action_no_http_call(self, config):
        service, dispatcher = _service(config)
        service.process_event({"opsgenieAction": "snooze", "alias": "a"})
        dispatcher.send.assert_not_called()

    def test_create_dispatched(self, config):
        service, dispatcher = _service(config)
        result = service.process_event({"opsgenieAction": "create", "message": "m"})
        dispatcher.send.assert_called_once_with(BASE_URL, {"message": "m"})
        assert result["action"] == "create"
        assert result["outcome"] == "success"
        assert result["attempts"] == 1
        assert service.stats["success"] == 1

    def test_failure_reported_not_raised(self, config):
        service, _ = _service(config, DispatchResult(
            outcome=DispatchOutcome.RETRIED_THEN_FAILED,
            attempts=6,
            failure=FailureKind.CONNECTION_REFUSED,
        ))
        result = service.process_event({"opsgenieAction": "close", "alias": "x"})
        assert result["outcome"] == "retried_then_failed"
        assert result["failure"] == "connection_refused"
        assert result["url"] == f"{BASE_URL}x/close?identifierType=alias"
        assert service.stats["retried_then_failed"] == 1

    def test_process_payload_list(self, config):
        service, dispatcher = _service(config)
        out = service.process_payload([
            {"opsgenieAction": "create", "message": "m"},
            {"opsgenieAction": "ack"},
            {"opsgenieAction": "note", "alertId": "1", "note": "n"},
        ])
        assert out["ok"] is True
        assert len(out["results"]) == 3
        assert dispatcher.send.call_count == 2
        assert out["results"][1]["status"] == "skipped"

    def test_process_payload_wrapped(self, config):
        service, dispatcher = _service(config)
        out = service.process_payload({"events": [{"opsgenieAction": "acknowledge", "alias": "a"}]})
        assert out["ok"] is True
        dispatcher.send.assert_called_once_with(f"{BASE_URL}a/acknowledge?identifierType=alias", {})

    def test_process_payload_unparseable(self, config):
        service, dispatcher = _service(config)
        assert service.process_payload("not an event") == {"ok": False, "error": "无法解析事件数据格式"}
        assert service.process_payload([])["ok"] is False
        dispatcher.send.assert_not_called()

    def test_with_real_dispatcher(self, config, fake_sleep, sleeps):
        transport = ScriptedTransport([failed(FailureKind.TIMEOUT), ok_result()])
        service = AlertService(config, dispatcher=Dispatcher(config, transport, sleep=fake_sleep))
        result = service.process_event({"opsgenieAction": "create", "message": "m", "alias": "a"})
        assert result["outcome"] == "success"
        assert result["attempts"] == 2
        assert sleeps == [0.5]
        assert transport.calls[-1]["payload"] == {"message": "m", "alias": "a"}
