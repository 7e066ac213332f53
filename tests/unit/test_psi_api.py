import httpx
import pytest
import respx

from services.dashboard_service.integrations.psi_api import PSI_ENDPOINT, fetch_pagespeed_metrics, parse_pagespeed_response


def _assert_synthetic(m):
    assert m.synthetic is True
    assert 65 <= m.lighthouse <= 90
    assert 1700 <= m.lcp <= 3500
    assert 0 <= m.cls <= 0.18
    assert 40 <= m.fid <= 180


@pytest.mark.asyncio
async def test_psi_parses_metrics():
    with respx.mock:
        route = respx.get(PSI_ENDPOINT).respond(
            200,
            json={
                "lighthouseResult": {
                    "categories": {"performance": {"score": 0.62}},
                    "audits": {
                        "largest-contentful-paint": {"numericValue": 4100.4},
                        "max-potential-fid": {"numericValue": 210},
                        "cumulative-layout-shift": {"numericValue": 0.31},
                    },
                }
            },
        )

        m = await fetch_pagespeed_metrics("https://example.com", api_key="fake")

        params = route.calls.last.request.url.params
        assert params["url"] == "https://example.com"
        assert params["strategy"] == "mobile"
        assert params["category"] == "performance"
        assert params["key"] == "fake"

    assert m.synthetic is False
    assert m.lighthouse == 62
    assert m.lcp == 4100.4
    assert m.fid == 210
    assert m.cls == 0.31


@pytest.mark.asyncio
async def test_psi_applies_defaults_for_missing_fields():
    with respx.mock:
        route = respx.get(PSI_ENDPOINT).respond(200, json={"lighthouseResult": {}})
        m = await fetch_pagespeed_metrics("https://example.com")
        assert "key" not in route.calls.last.request.url.params

    assert m.lighthouse == 75
    assert m.lcp == 2800
    assert m.cls == 0.12
    assert m.fid == 120


@pytest.mark.asyncio
async def test_psi_http_error_falls_back_to_synthetic():
    with respx.mock:
        respx.get(PSI_ENDPOINT).respond(429, json={"error": "quota"})
        m = await fetch_pagespeed_metrics("https://example.com")

    _assert_synthetic(m)


@pytest.mark.asyncio
async def test_psi_network_failure_falls_back_to_synthetic():
    with respx.mock:
        respx.get(PSI_ENDPOINT).mock(side_effect=httpx.ConnectError("boom"))
        m = await fetch_pagespeed_metrics("https://example.com")

    _assert_synthetic(m)


@pytest.mark.asyncio
async def test_psi_garbage_body_falls_back_to_synthetic():
    with respx.mock:
        respx.get(PSI_ENDPOINT).respond(200, text="<html>not json</html>")
        m = await fetch_pagespeed_metrics("https://example.com")

    _assert_synthetic(m)


@pytest.mark.asyncio
async def test_psi_malformed_sections_use_defaults():
    with respx.mock:
        respx.get(PSI_ENDPOINT).respond(200, json={
            "lighthouseResult": {
                "categories": {"performance": "n/a"},
                "audits": {
                    "largest-contentful-paint": "n/a",
                    "cumulative-layout-shift": {"numericValue": "0.2"},
                    "max-potential-fid": None,
                },
            }
        })
        m = await fetch_pagespeed_metrics("https://example.com")

    assert m.synthetic is False
    assert m.lighthouse == 75
    assert m.lcp == 2800
    assert m.cls == 0.12
    assert m.fid == 120


def test_parse_tolerates_non_dict_levels():
    for body in ({"lighthouseResult": "oops"}, {"lighthouseResult": {"audits": []}}, {}):
        m = parse_pagespeed_response(body)
        assert (m.lighthouse, m.lcp, m.cls, m.fid) == (75, 2800, 0.12, 120)


def test_score_rounds_half_up():
    m = parse_pagespeed_response({"lighthouseResult": {"categories": {"performance": {"score": 0.625}}}})
    assert m.lighthouse == 63
