import httpx
import pytest

from services.account_monitor.fetcher import AccountSnapshotFetcher
from services.account_monitor.models import AccountSnapshot

TOKEN = "0f3c2a9e-7b1d-4c55-9e0a-3d2b1c4f5e6a"

SUMMARY = {
    "balance": 10000.5,
    "equity": 10250.75,
    "margin": 500,
    "freeMargin": 9750.75,
    "marginLevel": 2050.15,
    "currency": "EUR",
    "profit": 250.25,
}
DETAILS = {
    "accountNumber": "12345",
    "accountName": "Demo Trader",
    "serverName": "Broker-Demo",
    "leverage": 100,
}


def make_fetcher(test_settings, transport):
    return AccountSnapshotFetcher(test_settings, http_client=transport.client())


@pytest.mark.asyncio
async def test_both_sources_are_merged(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(200, json=SUMMARY),
        "/AccountDetails": httpx.Response(200, json=DETAILS),
    }))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot.balance == 10000.5
    assert snapshot.free_margin == 9750.75
    assert snapshot.margin_level == 2050.15
    assert snapshot.currency == "EUR"
    assert snapshot.account_number == "12345"
    assert snapshot.account_name == "Demo Trader"
    assert snapshot.server_name == "Broker-Demo"
    assert snapshot.leverage == 100
    assert sorted(transport.paths()) == ["/AccountDetails", "/AccountSummary"]
    for request in transport.requests:
        assert request.url.params["id"] == TOKEN


@pytest.mark.asyncio
async def test_failed_summary_keeps_details(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(500, text="boom"),
        "/AccountDetails": httpx.Response(200, json={"accountNumber": "12345"}),
    }))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot.account_number == "12345"
    assert snapshot.balance == 0
    assert snapshot.equity == 0
    assert snapshot.currency == "USD"
    assert snapshot.account_name == "N/A"
    assert snapshot.server_name == "N/A"


@pytest.mark.asyncio
async def test_failed_details_keeps_summary(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(200, json=SUMMARY),
        "/AccountDetails": httpx.Response(401),
    }))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot.balance == 10000.5
    assert snapshot.account_number == "N/A"
    assert snapshot.leverage == 0


@pytest.mark.asyncio
async def test_both_sources_failing_gives_defaults(test_settings, recording_transport, route):
    transport = recording_transport(route({}))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot == AccountSnapshot.defaults()


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["", "   ", None])
async def test_missing_token_sends_nothing(test_settings, recording_transport, route, token):
    transport = recording_transport(route({"/AccountSummary": httpx.Response(200, json=SUMMARY)}))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(token)

    assert snapshot == AccountSnapshot.defaults()
    assert transport.requests == []


@pytest.mark.asyncio
async def test_malformed_bodies_count_as_absent(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(200, content=b"<html>oops</html>"),
        "/AccountDetails": httpx.Response(200, json=[DETAILS]),
    }))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot == AccountSnapshot.defaults()


@pytest.mark.asyncio
async def test_wrongly_typed_field_keeps_its_siblings(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(200, json={"balance": "lots", "equity": 500, "currency": ["EUR"]}),
        "/AccountDetails": httpx.Response(200, json={
            "accountNumber": "12345",
            "accountName": "Demo",
            "serverName": "Broker-Demo",
            "leverage": "1:100",
        }),
    }))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    # Only the unreadable fields fall back
    assert snapshot.balance == 0
    assert snapshot.currency == "USD"
    assert snapshot.equity == 500
    assert snapshot.leverage == 0
    assert snapshot.account_number == "12345"
    assert snapshot.account_name == "Demo"
    assert snapshot.server_name == "Broker-Demo"


def test_source_models_drop_only_bad_fields():
    from services.account_monitor.models import AccountDetails, AccountSummary

    summary = AccountSummary.model_validate({"balance": {"v": 1}, "profit": "12.5", "marginLevel": None})
    details = AccountDetails.model_validate({"accountNumber": 987654, "leverage": "n/a"})

    assert summary.balance is None
    assert summary.profit == 12.5
    assert details.account_number == "987654"
    assert details.leverage is None


@pytest.mark.asyncio
async def test_null_and_missing_fields_take_defaults(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(200, json={"balance": 42.0, "equity": None, "currency": None}),
        "/AccountDetails": httpx.Response(200, json={"accountNumber": 987654, "unknownField": True}),
    }))
    fetcher = make_fetcher(test_settings, transport)

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot.balance == 42.0
    assert snapshot.equity == 0
    assert snapshot.currency == "USD"
    # Numeric logins are reported as strings
    assert snapshot.account_number == "987654"


@pytest.mark.asyncio
async def test_transport_error_on_one_source(test_settings, recording_transport):
    def handler(request):
        if request.url.path == "/AccountSummary":
            raise httpx.ConnectError("connection reset", request=request)
        return httpx.Response(200, json=DETAILS)

    fetcher = make_fetcher(test_settings, recording_transport(handler))

    snapshot = await fetcher.fetch_snapshot(TOKEN)

    assert snapshot.balance == 0
    assert snapshot.server_name == "Broker-Demo"


@pytest.mark.asyncio
async def test_timeout_on_both_sources(test_settings, recording_transport):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    fetcher = make_fetcher(test_settings, recording_transport(handler))

    assert await fetcher.fetch_snapshot(TOKEN) == AccountSnapshot.defaults()


@pytest.mark.asyncio
async def test_repeated_fetches_of_unchanged_account_are_equal(test_settings, recording_transport, route):
    transport = recording_transport(route({
        "/AccountSummary": httpx.Response(200, json=SUMMARY),
        "/AccountDetails": httpx.Response(200, json=DETAILS),
    }))
    fetcher = make_fetcher(test_settings, transport)

    first = await fetcher.fetch_snapshot(TOKEN)
    second = await fetcher.fetch_snapshot(TOKEN)

    assert first == second
    assert len(transport.requests) == 4


def test_merge_takes_each_field_from_its_own_source():
    from services.account_monitor.models import AccountDetails, AccountSummary

    snapshot = AccountSnapshot.merge(
        AccountSummary.model_validate({"balance": 1.5, "freeMargin": 2.5}),
        AccountDetails.model_validate({"serverName": "Live-1"}),
    )

    assert snapshot.to_wire() == {
        "balance": 1.5,
        "equity": 0,
        "margin": 0,
        "freeMargin": 2.5,
        "marginLevel": 0,
        "currency": "USD",
        "profit": 0,
        "accountNumber": "N/A",
        "accountName": "N/A",
        "serverName": "Live-1",
        "leverage": 0,
    }
