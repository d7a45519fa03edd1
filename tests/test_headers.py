from switchyard.networking.interceptors.headers import HeaderInjector

from helpers import BASE_URL, ScriptedTransport, prepare, run


def test_adds_configured_headers_for_base_url_host():
    transport = ScriptedTransport(200)
    injector = HeaderInjector.for_base_url(
        {"X-Client-Id": "test-client", "X-App-Version": "7"}, BASE_URL
    )

    run([injector], transport)

    sent = transport.sent[0]
    assert sent.headers["X-Client-Id"] == "test-client"
    assert sent.headers["X-App-Version"] == "7"


def test_existing_header_is_never_overwritten():
    transport = ScriptedTransport(200)
    injector = HeaderInjector.for_base_url({"X-Client-Id": "default"}, BASE_URL)

    run([injector], transport, prepare(headers={"x-client-id": "caller"}))

    assert transport.sent[0].headers["X-Client-Id"] == "caller"


def test_default_pattern_skips_other_hosts():
    transport = ScriptedTransport(200)
    injector = HeaderInjector.for_base_url({"X-Client-Id": "c"}, BASE_URL)

    run([injector], transport, prepare(url="https://cdn.example.org/image"))

    assert "X-Client-Id" not in transport.sent[0].headers


def test_default_pattern_matches_whole_host_only():
    transport = ScriptedTransport(200)
    injector = HeaderInjector.for_base_url({"X-Client-Id": "c"}, BASE_URL)

    run([injector], transport, prepare(url="https://api.example.com.evil.io/x"))

    assert "X-Client-Id" not in transport.sent[0].headers


def test_custom_pattern_matches_any_subdomain():
    transport = ScriptedTransport(200)
    injector = HeaderInjector.for_base_url(
        {"X-Client-Id": "c"}, BASE_URL, pattern=r".*\.example\.org"
    )

    run([injector], transport, prepare(url="https://cdn.example.org/a"))

    assert transport.sent[0].headers["X-Client-Id"] == "c"


def test_empty_header_map_passes_request_through_untouched():
    transport = ScriptedTransport(200)
    request = prepare()

    run([HeaderInjector({}, ".*")], transport, request)

    assert transport.sent[0] is request


def test_original_request_is_not_mutated():
    transport = ScriptedTransport(200)
    request = prepare()

    run([HeaderInjector({"X-Extra": "1"}, ".*")], transport, request)

    assert "X-Extra" not in request.headers
    assert transport.sent[0] is not request
