from __future__ import annotations

import asyncio

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from pansou.gateway.errors import ClientInputError
from pansou.gateway.services.image_relay import (
    CACHE_CONTROL,
    IMAGE_ACCEPT,
    RelayedImage,
    guess_content_type,
    host_allowed,
    parse_target,
)

ALLOWED = ("douban.com", "doubanio.com")
POSTER = "https://img3.doubanio.com/view/photo/s_ratio_poster/public/p2913554676.jpg"


@pytest.mark.parametrize(
    "host",
    ["img3.doubanio.com", "doubanio.com", "movie.douban.com", "IMG1.DOUBANIO.COM", "img9.doubanio.com."],
)
def test_allowed_hosts(host: str) -> None:
    assert host_allowed(host, ALLOWED)


@pytest.mark.parametrize(
    "host",
    ["evil.com", "notdoubanio.com", "doubanio.com.evil.com", "douban.co", "", "xdouban.com"],
)
def test_rejected_hosts(host: str) -> None:
    assert not host_allowed(host, ALLOWED)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "img3.doubanio.com/p.jpg",
        "/view/photo/p.jpg",
        "//img3.doubanio.com/p.jpg",
        "ftp://img3.doubanio.com/p.jpg",
        "javascript:alert(1)",
        "https://user:pw@img3.doubanio.com/p.jpg",
        "https://img3.doubanio.com:notaport/p.jpg",
    ],
)
def test_parse_target_rejects_non_absolute_or_credentialed(raw: str) -> None:
    with pytest.raises(ClientInputError):
        parse_target(raw)


def test_parse_target_lowercases_host_and_keeps_query() -> None:
    target = parse_target("HTTPS://IMG3.DoubanIO.com:8443/view/p.webp?x=1")
    assert target.host == "img3.doubanio.com"
    assert target.url == "https://img3.doubanio.com:8443/view/p.webp?x=1"


def test_guess_content_type() -> None:
    assert guess_content_type("/view/photo/p1.png") == "image/png"
    assert guess_content_type("/view/photo/p1") == "image/jpeg"


def test_relay_streams_allowed_image(client: TestClient) -> None:
    payload = b"\xff\xd8\xff\xe0fake-jpeg"
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get(POSTER).respond(200, content=payload, headers={"Content-Type": "image/jpeg"})
        response = client.get("/img", params={"u": POSTER})

    assert response.status_code == 200
    assert response.content == payload
    assert response.headers["content-type"] == "image/jpeg"
    assert response.headers["cache-control"] == CACHE_CONTROL

    upstream = route.calls.last.request
    assert upstream.headers["Referer"] == "https://movie.douban.com/"
    assert upstream.headers["Accept"] == IMAGE_ACCEPT
    assert "Mozilla/5.0" in upstream.headers["User-Agent"]


def test_relay_accepts_url_parameter_and_infers_type(client: TestClient) -> None:
    target = "https://img1.doubanio.com/view/photo/m/public/p1.png"
    with respx.mock(assert_all_called=False) as mock:
        mock.get(target).respond(200, content=b"png-bytes")
        response = client.get("/img", params={"url": target})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"


def test_u_takes_precedence_over_url(client: TestClient) -> None:
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get(POSTER).respond(200, content=b"x", headers={"Content-Type": "image/jpeg"})
        response = client.get("/img", params={"u": POSTER, "url": "https://evil.com/x.jpg"})

    assert response.status_code == 200
    assert route.called


def test_relay_rejects_disallowed_host(client: TestClient) -> None:
    with respx.mock(assert_all_called=False) as mock:
        evil = mock.get(host="evil.com")
        response = client.get("/img", params={"u": "https://evil.com/cat.jpg"})

    assert response.status_code == 403
    assert response.content == b""
    assert not evil.called


def test_relay_rejects_missing_and_relative_urls(client: TestClient) -> None:
    assert client.get("/img").status_code == 400
    assert client.get("/img", params={"u": "view/photo/p.jpg"}).status_code == 400


def test_relay_non_200_is_bad_gateway(client: TestClient) -> None:
    with respx.mock(assert_all_called=False) as mock:
        mock.get(POSTER).respond(404)
        response = client.get("/img", params={"u": POSTER})

    assert response.status_code == 502
    assert response.content == b""


def test_relay_transport_failure_is_bad_gateway(client: TestClient) -> None:
    with respx.mock(assert_all_called=False) as mock:
        mock.get(POSTER).mock(side_effect=httpx.ReadTimeout("slow"))
        response = client.get("/img", params={"u": POSTER})

    assert response.status_code == 502


def test_relay_does_not_follow_redirects_off_the_allowlist(client: TestClient) -> None:
    with respx.mock(assert_all_called=False) as mock:
        mock.get(POSTER).respond(302, headers={"Location": "https://evil.com/x.jpg"})
        evil = mock.get(host="evil.com")
        response = client.get("/img", params={"u": POSTER})

    assert response.status_code == 502
    assert not evil.called


def test_unstarted_relay_body_still_releases_upstream() -> None:
    image = RelayedImage(content_type="image/jpeg", response=httpx.Response(200, content=b"jpeg"))

    asyncio.run(image.aclose())
    asyncio.run(image.aclose())

    assert image.response.is_closed
