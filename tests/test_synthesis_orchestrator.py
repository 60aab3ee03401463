"""Tests for request-level synthesis and cancellation."""

from __future__ import annotations

import asyncio
import dataclasses

import httpx
import pytest

from voice_relay.services.tts import (
    CancellationToken,
    ProviderRegistry,
    ProviderTransportError,
    SynthesisCancelled,
    SynthesisOrchestrator,
    SynthesisRequest,
    UnsupportedProviderError,
)


def make_orchestrator(settings, handler) -> SynthesisOrchestrator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SynthesisOrchestrator(ProviderRegistry(settings, http_client=client))


def _echo(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"audio")


@pytest.mark.asyncio
async def test_synthesize_wraps_audio_result(settings):
    orchestrator = make_orchestrator(settings, _echo)

    result = await orchestrator.synthesize(SynthesisRequest(text="Hello world"))

    assert result.audio == b"audio"
    assert result.format == "mp3"
    assert result.provider == "google"
    assert result.voice_options["voice"] == "en-US"
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.audio = b"other"  # type: ignore[misc]


@pytest.mark.asyncio
async def test_result_reports_options_actually_used(settings):
    orchestrator = make_orchestrator(settings, _echo)

    result = await orchestrator.synthesize_text("Hola", "google", {"voice": "es-ES", "slow": True})

    assert result.voice_options["voice"] == "es-ES"
    assert result.voice_options["slow"] is True
    with pytest.raises(TypeError):
        result.voice_options["voice"] = "en-US"  # type: ignore[index]


@pytest.mark.asyncio
async def test_concurrent_requests_do_not_share_options(settings):
    seen: list[tuple[str, str]] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if params["q"] == "first":
            await asyncio.sleep(0.02)
        seen.append((params["q"], params["tl"]))
        return httpx.Response(200, content=b"x")

    orchestrator = make_orchestrator(settings, handler)

    await asyncio.gather(
        orchestrator.synthesize_text("first", "google", {"voice": "fr-FR"}),
        orchestrator.synthesize_text("second", "google", {"voice": "de-DE"}),
    )

    assert sorted(seen) == [("first", "fr"), ("second", "de")]


@pytest.mark.asyncio
async def test_provider_failure_propagates(settings):
    orchestrator = make_orchestrator(settings, lambda request: httpx.Response(500))

    with pytest.raises(ProviderTransportError) as exc_info:
        await orchestrator.synthesize_text("Hello")

    message = orchestrator.failure_message(None, exc_info.value)
    assert message.startswith("Failed to generate audio with Google TTS: ")
    assert "500" in message


def test_failure_message_names_provider_from_error(settings):
    orchestrator = make_orchestrator(settings, _echo)

    error = ProviderTransportError("elevenlabs", "boom")

    assert orchestrator.failure_message(None, error) == "Failed to generate audio with Eleven Labs: boom"


@pytest.mark.asyncio
async def test_cancelled_token_prevents_any_request(settings):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=b"x")

    orchestrator = make_orchestrator(settings, handler)
    token = CancellationToken()
    token.cancel("user stopped")

    with pytest.raises(SynthesisCancelled, match="user stopped"):
        await orchestrator.synthesize(SynthesisRequest(text="Hello"), cancel=token)

    assert requests == []


@pytest.mark.asyncio
async def test_cancel_stops_in_flight_chunks(settings):
    started = asyncio.Event()
    interrupted: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            interrupted.append(request.url.params["q"][0])
            raise
        return httpx.Response(200, content=b"late")  # pragma: no cover

    orchestrator = make_orchestrator(settings, handler)
    token = CancellationToken()
    task = asyncio.create_task(
        orchestrator.synthesize(SynthesisRequest(text="A" * 200 + "B" * 200), cancel=token)
    )

    await asyncio.wait_for(started.wait(), timeout=1)
    token.cancel()

    with pytest.raises(SynthesisCancelled):
        await asyncio.wait_for(task, timeout=1)
    assert interrupted


@pytest.mark.asyncio
async def test_list_voices_and_providers(make_settings):
    orchestrator = make_orchestrator(make_settings(elevenlabs_api_key="key"), lambda r: httpx.Response(503))

    voices = await orchestrator.list_voices("elevenlabs")

    assert len(voices) == 9
    assert orchestrator.get_available_providers() == ["google", "elevenlabs"]
    assert len(await orchestrator.list_voices()) == 11


@pytest.mark.asyncio
async def test_list_voices_for_unconfigured_provider_uses_fixed_catalog(settings):
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        raise AssertionError(f"unexpected request to {request.url}")

    orchestrator = make_orchestrator(settings, handler)

    voices = await orchestrator.list_voices("elevenlabs")

    assert len(voices) == 9
    assert voices[0].name == "Rachel"


@pytest.mark.asyncio
async def test_list_voices_rejects_unknown_provider(settings):
    orchestrator = make_orchestrator(settings, _echo)

    with pytest.raises(UnsupportedProviderError):
        await orchestrator.list_voices("unknown-provider")
