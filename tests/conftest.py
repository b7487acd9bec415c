import json
from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests

from autoscale.services.policy_service import ServiceResponse


class FakePolicyService:
    """
    In-memory PolicyService recording every call.

    Responses are queued per method name; a queued exception is raised
    instead of returned.
    """

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []
        self.responses: Dict[str, Any] = {}

    def respond(self, method: str, result: Any) -> None:
        self.responses[method] = result

    def _call(self, method: str, *args) -> ServiceResponse:
        self.calls.append((method, args))
        result = self.responses.get(method, ServiceResponse(status_code=204))
        if isinstance(result, Exception):
            raise result
        return result

    def create_policy(self, group_id, change_set):
        return self._call("create_policy", group_id, change_set)

    def update_policy(self, group_id, policy_id, change_set):
        return self._call("update_policy", group_id, policy_id, change_set)

    def delete_policy(self, group_id, policy_id):
        return self._call("delete_policy", group_id, policy_id)

    def execute_policy(self, group_id, policy_id):
        return self._call("execute_policy", group_id, policy_id)

    def list_webhooks(self, group_id, policy_id):
        return self._call("list_webhooks", group_id, policy_id)

    def get_policy(self, group_id, policy_id):
        return self._call("get_policy", group_id, policy_id)


@pytest.fixture
def fake_service():
    return FakePolicyService()


@pytest.fixture
def server_policy():
    return {
        "id": "p-1",
        "name": "p1",
        "type": "schedule",
        "cooldown": 60,
        "args": {"cron": "*/5 * * * *"},
        "links": [{"href": "https://autoscale.example.com/v1.0/123/groups/g-1/policies/p-1/", "rel": "self"}],
    }


def make_response(status_code: int, body: Optional[Any] = None, text: Optional[str] = None) -> requests.Response:
    """Build a real requests.Response for feeding a mocked session."""
    resp = requests.Response()
    resp.status_code = status_code
    if text is not None:
        resp._content = text.encode("utf-8")
    elif body is not None:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = b""
    return resp


@pytest.fixture
def response_factory():
    return make_response
