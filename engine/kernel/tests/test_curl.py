"""
widgetboard kernel — cURL Import Tests
"""

import pytest

from engine.kernel.curl import DEFAULT_WIDGET_CODE, CurlRequest, parse_curl, widget_code_from_curl
from engine.kernel.executor import check_syntax


class TestParseCurl:
    def test_simple_get(self):
        req = parse_curl("curl https://api.example.com/data")
        assert req == CurlRequest(url="https://api.example.com/data", method="GET")

    def test_method_headers_and_json_body(self):
        req = parse_curl(
            "curl -X PUT 'https://api.example.com/items' "
            "-H 'Authorization: Bearer abc' "
            "--data '{\"a\": 1}'"
        )
        assert req.method == "PUT"
        assert req.headers["Authorization"] == "Bearer abc"
        assert req.headers["Content-Type"] == "application/json"
        assert req.body == '{"a": 1}'

    def test_body_without_method_is_post(self):
        req = parse_curl("curl https://api.example.com -d 'a=1&b=2'")
        assert req.method == "POST"
        assert req.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_explicit_content_type_kept(self):
        req = parse_curl("curl https://x.example -H 'content-type: text/plain' -d '{}'")
        assert req.headers == {"content-type": "text/plain"}

    def test_line_continuations(self):
        req = parse_curl("curl \\\n  --request POST \\\n  https://x.example/a")
        assert req.method == "POST"
        assert req.url == "https://x.example/a"

    def test_missing_url(self):
        with pytest.raises(ValueError, match="Could not find URL in cURL command"):
            parse_curl("curl -X GET")

    def test_unbalanced_quotes(self):
        with pytest.raises(ValueError):
            parse_curl("curl 'https://x.example")


class TestWidgetCode:
    def test_generated_code_compiles(self):
        req = parse_curl("curl -X POST https://api.example.com/q -H 'X-Key: 1' -d '{\"field\": \"x\"}'")
        code = widget_code_from_curl(req)

        assert check_syntax(code) is None
        assert "json={'field': 'x'}" in code
        assert "method='POST'" in code

    def test_raw_body_passed_as_body(self):
        code = widget_code_from_curl(parse_curl("curl https://x.example -d 'a=1'"))
        assert "body='a=1'" in code
        assert check_syntax(code) is None

    def test_default_template_compiles(self):
        assert check_syntax(DEFAULT_WIDGET_CODE) is None
