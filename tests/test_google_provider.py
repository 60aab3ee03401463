"""Tests for the Google Translate TTS provider."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from voice_relay.services.tts import (
    GoogleTTSProvider,
    ProviderTransportError,
)


def make_provider(settings, handler, **kwargs) -> GoogleTTSProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleTTSProvider(settings, http_client=client, **kwargs)


@pytest.mark.asyncio
async def test_short_text_uses_single_request(settings):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=b"mp3-bytes")

    provider = make_provider(settings, handler)

    audio = await provider.synthesize("Hello world")

    assert audio == b"mp3-bytes"
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/translate_tts"
    assert request.url.params["q"] == "Hello world"
    assert request.url.params["tl"] == "en"
    assert request.url.params["client"] == "tw-ob"
    assert request.url.params["textlen"] == "11"
    assert request.url.params["ttsspeed"] == "1"


@pytest.mark.asyncio
async def test_long_text_joins_chunks_in_original_order(settings):
    completed: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        marker = request.url.params["q"][0]
        if marker == "B":
            # Middle chunk resolves last
            await asyncio.sleep(0.05)
        completed.append(marker)
        return httpx.Response(200, content=f"<{marker}>".encode())

    provider = make_provider(settings, handler)
    text = "A" * 200 + "B" * 200 + "C" * 50

    audio = await provider.synthesize(text)

    assert audio == b"<A><B><C>"
    assert len(completed) == 3
    assert completed[-1] == "B"


@pytest.mark.asyncio
async def test_failed_chunk_fails_whole_request(settings):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["q"].startswith("B"):
            return httpx.Response(503)
        await asyncio.sleep(0.01)
        return httpx.Response(200, content=b"ok")

    provider = make_provider(settings, handler)

    with pytest.raises(ProviderTransportError) as exc_info:
        await provider.synthesize("A" * 200 + "B" * 200)

    assert exc_info.value.status_code == 503
    assert exc_info.value.provider == "google"
    assert "Failed to fetch audio" in str(exc_info.value)


@pytest.mark.asyncio
async def test_network_error_is_wrapped(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = make_provider(settings, handler)

    with pytest.raises(ProviderTransportError, match="Network error contacting Google TTS"):
        await provider.synthesize("Hello")


@pytest.mark.asyncio
async def test_timeout_is_wrapped(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    provider = make_provider(settings, handler)

    with pytest.raises(ProviderTransportError, match="timed out"):
        await provider.synthesize("Hello")


@pytest.mark.asyncio
async def test_empty_body_is_an_error(settings):
    provider = make_provider(settings, lambda request: httpx.Response(200, content=b""))

    with pytest.raises(ProviderTransportError, match="empty response body"):
        await provider.synthesize("Hello")


@pytest.mark.asyncio
async def test_per_call_options_do_not_mutate_defaults(settings):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=b"x")

    provider = make_provider(settings, handler)

    await provider.synthesize("Hola", {"voice": "es-ES", "slow": True})
    await provider.synthesize("Hello")

    assert requests[0].url.params["tl"] == "es"
    assert requests[0].url.params["ttsspeed"] == "0.24"
    assert requests[1].url.params["tl"] == "en"
    assert provider.get_voice_options().slow is False
    assert provider.get_voice_options().voice == "en-US"


@pytest.mark.asyncio
async def test_explicit_language_overrides_voice(make_settings):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=b"x")

    provider = make_provider(make_settings(google_tts_language="fr"), handler)

    await provider.synthesize("Bonjour")
    await provider.synthesize("Ni hao", {"voice": "zh-CN", "language": None})

    assert requests[0].url.params["tl"] == "fr"
    assert requests[1].url.params["tl"] == "zh-CN"


def test_voice_options_accessors(settings):
    provider = GoogleTTSProvider(settings, options={"voice": "test-voice", "pitch": 1.5, "rate": 1.2})

    options = provider.get_voice_options()
    assert (options.voice, options.pitch, options.rate) == ("test-voice", 1.5, 1.2)

    provider.set_voice_options({"slow": True})
    assert provider.get_voice_options().slow is True
    assert provider.get_voice_options().voice == "test-voice"


def test_is_always_configured(settings):
    assert GoogleTTSProvider(settings).is_configured() is True


@pytest.mark.asyncio
async def test_list_voices_returns_static_catalog(settings):
    provider = GoogleTTSProvider(settings)

    voices = await provider.list_voices()

    assert len(voices) == 11
    assert voices[0].id == "en-US"
    assert {voice.provider for voice in voices} == {"google"}


@pytest.mark.asyncio
async def test_whitespace_text_makes_no_request(settings):
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        raise AssertionError("no request expected")

    provider = make_provider(settings, handler)

    assert await provider.synthesize("   ") == b""

