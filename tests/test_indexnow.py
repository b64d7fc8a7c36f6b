from unittest.mock import patch

import pytest
import requests

from engines.config import BingConfig
from engines.errors import InputError, TransportError
from engines.indexnow import ENDPOINT, IndexNowAdapter, submit_urls
from engines.outcomes import SubmitStatus
from tests.conftest import FakeResponse

URLS = ["https://www.example.com/a", "https://www.example.com/b"]


@pytest.mark.parametrize("code", [200, 202])
def test_accepted_codes_are_success(code):
    with patch("engines.indexnow.requests.post", return_value=FakeResponse(code, text="")) as post:
        result = submit_urls("k123", URLS)
    assert result.status is SubmitStatus.SUCCESS
    assert result.code == code
    assert post.call_args.args[0] == ENDPOINT
    assert post.call_args.kwargs["json"] == {"host": "www.example.com", "key": "k123", "urlList": URLS}


def test_key_location_is_sent_when_configured():
    with patch("engines.indexnow.requests.post", return_value=FakeResponse(200, text="")) as post:
        submit_urls("k", URLS, key_location="https://www.example.com/k.txt")
    assert post.call_args.kwargs["json"]["keyLocation"] == "https://www.example.com/k.txt"


def test_rejection_keeps_raw_body():
    with patch("engines.indexnow.requests.post", return_value=FakeResponse(403, text="Key not valid")):
        result = submit_urls("k", URLS)
    assert result.status is SubmitStatus.FAILED
    assert result.message == "Key not valid"
    assert result.code == 403


def test_network_error_raises_transport_error():
    with patch("engines.indexnow.requests.post", side_effect=requests.Timeout("slow")):
        with pytest.raises(TransportError):
            IndexNowAdapter(BingConfig(api_key="k")).submit(URLS)


def test_missing_key_short_circuits():
    with patch("engines.indexnow.requests.post") as post:
        result = IndexNowAdapter(BingConfig()).submit(URLS)
    assert result.status is SubmitStatus.FAILED
    assert result.error == "ConfigError"
    post.assert_not_called()


def test_invalid_url_is_input_error():
    with patch("engines.indexnow.requests.post") as post:
        with pytest.raises(InputError):
            IndexNowAdapter(BingConfig(api_key="k")).submit(["example.com/no-scheme"])
    post.assert_not_called()
