"""Builds upscale requests with a resolution-specific instruction."""

from typing import Dict

from ..models.enums import EnhancementMode
from ..models.schemas import UpscaleRequest

RESOLUTIONS: Dict[EnhancementMode, str] = {
    EnhancementMode.TWO_K: "2560x1440",
    EnhancementMode.FOUR_K: "3840x2160",
}

RESOLUTION_LABELS: Dict[EnhancementMode, str] = {
    EnhancementMode.TWO_K: f"2K ({RESOLUTIONS[EnhancementMode.TWO_K]})",
    EnhancementMode.FOUR_K: f"4K ({RESOLUTIONS[EnhancementMode.FOUR_K]})",
}

INSTRUCTION_TEMPLATE = (
    "Upscale this image to a crisp, photorealistic {resolution} resolution. "
    "Enhance details, sharpness, and overall quality. "
    "Avoid introducing artificial textures or artifacts. "
    "The result should look like a higher-resolution photograph."
)


class RequestBuilder:
    """Maps an enhancement mode to an instruction and assembles the request."""

    def instruction_for(self, mode: EnhancementMode) -> str:
        return INSTRUCTION_TEMPLATE.format(resolution=RESOLUTION_LABELS[EnhancementMode(mode)])

    def build(
        self,
        encoded_image: str,
        media_type: str,
        mode: EnhancementMode,
    ) -> UpscaleRequest:
        """
        Assemble the request sent to the image-generation service.

        Args:
            encoded_image: Base64 image bytes
            media_type: Declared media type of the source image
            mode: Target resolution tier

        Returns:
            UpscaleRequest restricted to image-only replies
        """
        mode = EnhancementMode(mode)
        return UpscaleRequest(
            encoded_image=encoded_image,
            media_type=media_type,
            instruction=self.instruction_for(mode),
            mode=mode,
            image_only=True,
        )
