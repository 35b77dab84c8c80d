"""Tests for the upscale session orchestrator."""

import asyncio

import pytest

from obatech_upscaler.core import UpscaleOrchestrator
from obatech_upscaler.core.validator import MAX_FILE_SIZE
from obatech_upscaler.models.enums import EnhancementMode, RejectionReason, SessionStatus
from obatech_upscaler.utils.errors import (
    CollaboratorError,
    ProviderError,
    RequestInFlightError,
    UpscalerError,
)

from .conftest import FakeImageClient, PNG_SIGNATURE, image_reply, text_reply


class TestSelection:
    """File selection and mode changes."""

    def test_accepted_file_becomes_source(self, orchestrator, png_bytes):
        outcome = orchestrator.select_file("image/png", len(png_bytes), png_bytes, "cat.png")

        assert outcome.accepted
        assert orchestrator.source.file_name == "cat.png"
        assert orchestrator.status == SessionStatus.IDLE

    def test_rejected_file_keeps_previous_selection(self, orchestrator, png_bytes):
        orchestrator.select_file("image/png", len(png_bytes), png_bytes, "cat.png")

        outcome = orchestrator.select_file("image/gif", 100, b"GIF89a", "anim.gif")

        assert outcome.reason == RejectionReason.INVALID_TYPE
        assert orchestrator.source.file_name == "cat.png"
        assert orchestrator.error == "Invalid file type. Please upload a JPG or PNG image."
        assert orchestrator.status == SessionStatus.IDLE

    def test_oversized_file_is_rejected(self, orchestrator):
        outcome = orchestrator.select_file("image/jpeg", MAX_FILE_SIZE + 1, b"\xff\xd8", "big.jpg")

        assert outcome.reason == RejectionReason.TOO_LARGE
        assert orchestrator.source is None

    @pytest.mark.asyncio
    async def test_new_selection_clears_previous_result(self, orchestrator, png_bytes):
        orchestrator.select_file("image/png", len(png_bytes), png_bytes, "one.png")
        await orchestrator.request_upscale()
        assert orchestrator.result is not None

        orchestrator.select_file("image/png", len(png_bytes), png_bytes, "two.png")

        assert orchestrator.result is None
        assert orchestrator.error is None
        assert orchestrator.status == SessionStatus.IDLE

    def test_select_path_reads_only_metadata(self, orchestrator, png_bytes, tmp_path):
        path = tmp_path / "holiday.png"
        path.write_bytes(png_bytes)

        outcome = orchestrator.select_path(path)

        assert outcome.accepted
        assert orchestrator.source.media_type == "image/png"
        assert orchestrator.source.size == len(png_bytes)
        assert orchestrator.source.content is None

    def test_negative_size_restores_status(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.select_file("image/png", -1, b"x")

        assert orchestrator.status == SessionStatus.IDLE
        assert orchestrator.source is None

    @pytest.mark.asyncio
    async def test_media_type_is_normalized_before_sending(self, orchestrator, fake_client, png_bytes):
        orchestrator.select_file("IMAGE/PNG; charset=binary", len(png_bytes), png_bytes)

        await orchestrator.request_upscale()

        assert orchestrator.source.media_type == "image/png"
        assert fake_client.requests[0].media_type == "image/png"

    def test_set_mode_accepts_values(self, orchestrator):
        assert orchestrator.mode == EnhancementMode.TWO_K
        assert orchestrator.set_mode("4k") == EnhancementMode.FOUR_K

    def test_set_mode_rejects_unknown_values(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.set_mode("8k")


class TestRequestUpscale:
    """The upscale pipeline and its settlement."""

    @pytest.mark.asyncio
    async def test_no_image_selected(self, orchestrator, fake_client):
        result = await orchestrator.request_upscale()

        assert not result.ok
        assert result.error_code == "NoImageSelected"
        assert result.error == "Please select an image first."
        assert fake_client.requests == []
        assert orchestrator.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_missing_credential_fails_without_calling_out(self, png_bytes):
        client = FakeImageClient()
        orchestrator = UpscaleOrchestrator(client=client, api_key=None)
        orchestrator.select_file("image/png", len(png_bytes), png_bytes, "cat.png")

        result = await orchestrator.request_upscale()

        assert result.error_code == "MissingCredential"
        assert "API_KEY" in result.error and "not set" in result.error
        assert client.requests == []
        assert orchestrator.status == SessionStatus.FAILED
        assert orchestrator.source is not None

    @pytest.mark.asyncio
    async def test_blank_credential_counts_as_missing(self, png_bytes):
        client = FakeImageClient()
        orchestrator = UpscaleOrchestrator(client=client, api_key="   ")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        result = await orchestrator.request_upscale()

        assert result.error_code == "MissingCredential"
        assert client.requests == []

    @pytest.mark.asyncio
    async def test_end_to_end_four_k(self, orchestrator, fake_client):
        content = PNG_SIGNATURE + bytes(2 * 1024 * 1024)
        orchestrator.select_file("image/png", len(content), content, "photo.png")
        orchestrator.set_mode(EnhancementMode.FOUR_K)

        result = await orchestrator.request_upscale()

        assert len(fake_client.requests) == 1
        request = fake_client.requests[0]
        assert "3840x2160" in request.instruction
        assert request.media_type == "image/png"
        assert request.image_only

        assert result.ok
        assert orchestrator.status == SessionStatus.SUCCEEDED
        snapshot = orchestrator.snapshot()
        assert snapshot.image_url == "data:image/png;base64,abc123"
        assert snapshot.download_name == "obatech-upscaled-photo.png"

    @pytest.mark.asyncio
    async def test_request_encodes_source_bytes(self, orchestrator, fake_client, png_bytes):
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        await orchestrator.request_upscale()

        sent = fake_client.requests[0].encoded_image
        assert orchestrator.encoder.decode(sent) == png_bytes

    @pytest.mark.asyncio
    async def test_text_reply_settles_failed(self, png_bytes):
        orchestrator = UpscaleOrchestrator(client=FakeImageClient(reply=text_reply()), api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        result = await orchestrator.request_upscale()

        assert result.error == "An error occurred: The AI did not return an image. Please try again."
        assert result.error_code == "NoUsableImageInResponse"
        assert orchestrator.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_malformed_inline_data_is_no_usable_image(self, png_bytes):
        reply = image_reply()
        reply["candidates"][0]["content"]["parts"][0]["inlineData"]["data"] = 12345
        orchestrator = UpscaleOrchestrator(client=FakeImageClient(reply=reply), api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        result = await orchestrator.request_upscale()

        assert result.error_code == "NoUsableImageInResponse"
        assert "did not return an image" in result.error

    @pytest.mark.asyncio
    async def test_collaborator_error_settles_failed(self, png_bytes):
        client = FakeImageClient(error=ProviderError("gemini", "model overloaded", 503))
        orchestrator = UpscaleOrchestrator(client=client, api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        result = await orchestrator.request_upscale()

        assert result.error_code == CollaboratorError.code
        assert "model overloaded" in result.error
        assert orchestrator.source is not None

    @pytest.mark.asyncio
    async def test_unexpected_error_settles_failed(self, png_bytes):
        client = FakeImageClient(error=KeyError("surprise"))
        orchestrator = UpscaleOrchestrator(client=client, api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        result = await orchestrator.request_upscale()

        assert result.error == "An unknown error occurred during upscaling."
        assert result.error_code == UpscalerError.code
        assert orchestrator.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_unreadable_file_is_encoding_error(self, orchestrator, fake_client, png_bytes, tmp_path):
        path = tmp_path / "vanishing.png"
        path.write_bytes(png_bytes)
        orchestrator.select_path(path)
        path.unlink()

        result = await orchestrator.request_upscale()

        assert result.error_code == "EncodingError"
        assert fake_client.requests == []

    @pytest.mark.asyncio
    async def test_failure_clears_previous_image(self, fake_client, png_bytes):
        orchestrator = UpscaleOrchestrator(client=fake_client, api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)
        await orchestrator.request_upscale()
        assert orchestrator.snapshot().image_url is not None

        fake_client.reply = text_reply()
        await orchestrator.request_upscale()

        assert orchestrator.snapshot().image_url is None
        assert orchestrator.snapshot().download_name is None

    @pytest.mark.asyncio
    async def test_failure_does_not_poison_next_request(self, fake_client, png_bytes):
        orchestrator = UpscaleOrchestrator(client=fake_client, api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)
        fake_client.error = CollaboratorError("connection reset")
        await orchestrator.request_upscale()

        fake_client.error = None
        result = await orchestrator.request_upscale()

        assert result.ok
        assert orchestrator.error is None
        assert orchestrator.status == SessionStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_second_request_while_in_flight_is_rejected(self, png_bytes):
        release = asyncio.Event()

        class SlowClient(FakeImageClient):
            async def generate_content(self, request):
                self.requests.append(request)
                await release.wait()
                return image_reply()

        client = SlowClient()
        orchestrator = UpscaleOrchestrator(client=client, api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        first = asyncio.ensure_future(orchestrator.request_upscale())
        while not client.requests:
            await asyncio.sleep(0)
        assert orchestrator.status == SessionStatus.IN_FLIGHT

        with pytest.raises(RequestInFlightError):
            await orchestrator.request_upscale()
        with pytest.raises(RequestInFlightError):
            orchestrator.set_mode(EnhancementMode.FOUR_K)

        release.set()
        result = await first

        assert result.ok
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_cancelled_request_does_not_block_the_session(self, png_bytes):
        class HangingClient(FakeImageClient):
            hang = True

            async def generate_content(self, request):
                if self.hang:
                    self.requests.append(request)
                    await asyncio.Event().wait()
                return await super().generate_content(request)

        client = HangingClient()
        orchestrator = UpscaleOrchestrator(client=client, api_key="k")
        orchestrator.select_file("image/png", len(png_bytes), png_bytes)

        task = asyncio.ensure_future(orchestrator.request_upscale())
        while not client.requests:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert orchestrator.status == SessionStatus.FAILED
        assert orchestrator.error_code == "RequestCancelled"
        assert orchestrator.source is not None

        orchestrator.set_mode(EnhancementMode.FOUR_K)
        client.hang = False
        result = await orchestrator.request_upscale()
        assert result.ok


def test_download_name_defaults_to_image(orchestrator):
    assert orchestrator.download_name() == "obatech-upscaled-image"
