"""OBATECH AI Upscaler: 2K/4K image upscaling through Gemini image generation."""

__version__ = "1.0.0"
