from unittest.mock import Mock

import pytest
import requests

from revline.services.exceptions import RecordFetchError
from revline.services.order_client import OrderClient


def _response(status=200, payload=None, ok=None):
    response = Mock()
    response.status_code = status
    response.ok = status < 400 if ok is None else ok
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class TestOrderClient:

    def test_get_order_unwraps_data(self, order_raw):
        session = Mock()
        session.get.return_value = _response(payload={"data": order_raw})
        client = OrderClient("http://backend.test/", token="abc", timeout=3, session=session)

        assert client.get_order("INV1") == order_raw
        session.get.assert_called_once_with(
            "http://backend.test/sec/orders/INV1",
            headers={"Content-Type": "application/json", "Authorization": "Bearer abc"},
            timeout=3,
        )

    def test_get_order_plain_object(self, order_raw):
        session = Mock()
        session.get.return_value = _response(payload=order_raw)
        assert OrderClient("http://backend.test", session=session).get_order("INV1") == order_raw

    def test_no_token_no_auth_header(self):
        session = Mock()
        session.get.return_value = _response(payload={"content": []})
        OrderClient("http://backend.test", session=session).get_employees()

        assert "Authorization" not in session.get.call_args.kwargs["headers"]

    def test_upstream_not_found(self):
        session = Mock()
        session.get.return_value = _response(404, {"message": "Order not found"})

        with pytest.raises(RecordFetchError) as exc:
            OrderClient("http://backend.test", session=session).get_order("nope")
        assert exc.value.message == "Order not found"
        assert exc.value.status_code == 404

    def test_upstream_error(self):
        session = Mock()
        session.get.return_value = _response(500, ValueError("no json"))

        with pytest.raises(RecordFetchError) as exc:
            OrderClient("http://backend.test", session=session).get_order("INV1")
        assert exc.value.status_code == 502
        assert exc.value.upstream_status == 500

    def test_unreachable(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(RecordFetchError) as exc:
            OrderClient("http://backend.test", session=session).get_order("INV1")
        assert exc.value.status_code == 502

    def test_invalid_json(self):
        session = Mock()
        session.get.return_value = _response(payload=ValueError("bad json"))

        with pytest.raises(RecordFetchError):
            OrderClient("http://backend.test", session=session).get_order("INV1")

    def test_get_employees(self, salary_raw):
        session = Mock()
        session.get.return_value = _response(payload={"content": [salary_raw]})
        client = OrderClient("http://backend.test", session=session)

        assert client.get_employees() == [salary_raw]
        assert session.get.call_args.args[0] == "http://backend.test/api/employees"

    def test_get_employees_plain_list(self, salary_raw):
        session = Mock()
        session.get.return_value = _response(payload=[salary_raw])
        assert OrderClient("http://backend.test", session=session).get_employees() == [salary_raw]

    def test_order_must_be_an_object(self):
        session = Mock()
        session.get.return_value = _response(payload=["INV1"])

        with pytest.raises(RecordFetchError):
            OrderClient("http://backend.test", session=session).get_order("INV1")
